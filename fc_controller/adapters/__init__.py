"""Control-plane adapters."""

from fc_controller.adapters.ssm import SSMControlPlane

__all__ = ["SSMControlPlane"]
