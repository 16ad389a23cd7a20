"""Mini README: Session wizard package.

Exports the state machine used by the admin interface to record a match.
"""

from .wizard import SessionWizard, WizardStateError, WizardStep

__all__ = ["SessionWizard", "WizardStateError", "WizardStep"]
