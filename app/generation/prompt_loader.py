from dataclasses import dataclass
from pathlib import Path

from app.generation.exceptions import PromptLoadError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

SYSTEM_FRAGMENTS = ("system", "guardrail_1", "guardrail_2", "guardrail_3")


@dataclass(frozen=True)
class PromptSet:
    """Prompt text loaded once at startup.

    The system prompt seeds every conversation and is the concatenation of
    the ordered system fragments.
    """

    system_fragments: tuple[str, ...]
    analysis: str
    compare: str
    cover_letter: str
    tokenize: str
    draft: str
    bullet: str

    @property
    def system_prompt(self) -> str:
        return "".join(self.system_fragments)


def load_prompt(name: str, prompts_dir: Path | None = None) -> str:
    """Load a single prompt fragment `<name>.txt`.

    Raises:
        PromptLoadError: if the file cannot be read.
    """
    path = (prompts_dir or _DEFAULT_PROMPT_DIR) / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PromptLoadError(f"Failed to load prompt '{name}': {exc}") from exc


def load_prompt_set(prompts_dir: Path | None = None) -> PromptSet:
    """Load every prompt fragment from a directory.

    Args:
        prompts_dir: Directory holding `<name>.txt` files.
                     Defaults to the bundled prompts.
    """
    return PromptSet(
        system_fragments=tuple(load_prompt(name, prompts_dir) for name in SYSTEM_FRAGMENTS),
        analysis=load_prompt("analysis", prompts_dir),
        compare=load_prompt("compare", prompts_dir),
        cover_letter=load_prompt("cover_letter", prompts_dir),
        tokenize=load_prompt("tokenize", prompts_dir),
        draft=load_prompt("draft", prompts_dir),
        bullet=load_prompt("bullet", prompts_dir),
    )
