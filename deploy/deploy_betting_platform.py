"""Deploy the BettingPlatform contract.

Compile the contracts first (``npx hardhat compile``) so the artifact exists,
then run from the project root:

    RPC_URL=http://127.0.0.1:8545 python deploy/deploy_betting_platform.py

Set DEPLOYER_PRIVATE_KEY to sign with your own key instead of the node's
unlocked accounts.
"""
import os
import sys

# ensure local package imports work when run from workspace root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from betting_deploy.cli import run


if __name__ == '__main__':
    run()
