"""FluoTitre Decisions — ROI placement and threshold confirmation providers."""

from fluotitre.decisions.base import DecisionProvider
from fluotitre.decisions.scripted import ScriptedDecisionProvider

__all__ = [
    "DecisionProvider",
    "NapariDecisionProvider",
    "PromptDecisionProvider",
    "ScriptedDecisionProvider",
    "make_provider",
]

PROVIDERS = ("auto", "prompt", "napari")


def make_provider(kind: str) -> DecisionProvider:
    """Create a decision provider by name ("auto", "prompt" or "napari")."""
    if kind == "auto":
        return ScriptedDecisionProvider()
    if kind == "prompt":
        from fluotitre.decisions.prompt import PromptDecisionProvider

        return PromptDecisionProvider()
    if kind == "napari":
        from fluotitre.decisions.napari_viewer import NapariDecisionProvider

        return NapariDecisionProvider()
    raise ValueError(f"Unknown decision provider {kind!r}. Choose from {list(PROVIDERS)}")


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    """Lazy imports for the interactive providers."""
    if name == "PromptDecisionProvider":
        from fluotitre.decisions.prompt import PromptDecisionProvider

        return PromptDecisionProvider
    if name == "NapariDecisionProvider":
        from fluotitre.decisions.napari_viewer import NapariDecisionProvider

        return NapariDecisionProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
