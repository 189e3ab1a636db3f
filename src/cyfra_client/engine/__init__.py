from cyfra_client.engine.mode import ModeController
from cyfra_client.engine.session import CyfraSession, SessionState

__all__ = ["CyfraSession", "ModeController", "SessionState"]
