import logging
import os
from functools import lru_cache
from pathlib import Path

from src.rules.loader import load_rules
from src.rules.models import TemplateRules

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(
            os.environ.get("TEMPLATE_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> TemplateRules | None:
    """Template rules, or None to run the engines on their built-in defaults."""
    settings = get_settings()
    if not settings.rules_path.exists():
        logger.info("No rules file at %s, using built-in defaults", settings.rules_path)
        return None
    return load_rules(settings.rules_path)
