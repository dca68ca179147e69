"""Gmail mail collaborator and message normalization.

Heavy imports are deferred. Use explicit imports:
    from autotask_agent.gmail.client import GmailClient
    from autotask_agent.gmail.auth import load_credentials
    from autotask_agent.gmail.normalizer import normalize
"""

# Light imports only (no external deps)
from autotask_agent.gmail.models import NO_SUBJECT, NormalizedEmail
from autotask_agent.gmail.normalizer import normalize


def __getattr__(name):
    """Lazy imports for classes that require the Google client libraries."""
    if name == "GmailClient":
        from autotask_agent.gmail.client import GmailClient
        return GmailClient
    if name == "load_credentials":
        from autotask_agent.gmail.auth import load_credentials
        return load_credentials
    raise AttributeError(f"module 'autotask_agent.gmail' has no attribute {name!r}")


__all__ = [
    "GmailClient",
    "load_credentials",
    "normalize",
    "NormalizedEmail",
    "NO_SUBJECT",
]
