"""装配流水线编排器

- models.py: Step / RunReport / StepContext
- steps.py: 标准装配步骤
- orchestrator.py: 顺序执行 + Fatal/Recoverable 分类
"""

from devsetup.services.orchestrator.models import RunReport, Step, StepContext
from devsetup.services.orchestrator.orchestrator import Orchestrator
from devsetup.services.orchestrator.steps import ProvisionSteps

__all__ = [
    "Orchestrator",
    "ProvisionSteps",
    "RunReport",
    "Step",
    "StepContext",
]
