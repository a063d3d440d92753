from .PWMChannel import PWMChannel, PWMError, PWMOperation, PWMState

__all__ = ["PWMChannel", "PWMError", "PWMOperation", "PWMState"]
