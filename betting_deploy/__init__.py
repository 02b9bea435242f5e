from betting_deploy.config import DeployConfig
from betting_deploy.pipeline import CONTRACT_NAME, DeploymentPipeline, RunResult

__all__ = ["CONTRACT_NAME", "DeployConfig", "DeploymentPipeline", "RunResult"]
