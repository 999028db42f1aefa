import math
import re
from typing import List, Pattern, Tuple

from src.core.config import settings
from src.models.schemas.pr_review.pr_patch import ChangedFile
from src.models.schemas.pr_review.context_bag import ContextBag
from src.services.context.contracts import ContextFilter

# First match wins
PRIORITY_PATTERNS: List[Tuple[Pattern, int]] = [
    # Core application code
    (re.compile(r"^app/"), 100),
    (re.compile(r"^src/"), 100),
    (re.compile(r"^lib/"), 90),
    # Configuration
    (re.compile(r"^config/"), 80),
    (re.compile(r"\.env\.example$"), 70),
    # Database
    (re.compile(r"^database/migrations/"), 85),
    (re.compile(r"^database/factories/"), 60),
    (re.compile(r"^database/seeders/"), 50),
    (re.compile(r"^routes/"), 75),
    # Tests
    (re.compile(r"^tests/"), 65),
    (re.compile(r"\.test\.(ts|js|tsx|jsx)$"), 65),
    (re.compile(r"\.spec\.(ts|js|tsx|jsx)$"), 65),
    (re.compile(r"Test\.php$"), 65),
    (re.compile(r"(^|/)test_[^/]*\.py$"), 65),
    # Frontend
    (re.compile(r"^resources/"), 70),
    (re.compile(r"^components/"), 70),
    (re.compile(r"^pages/"), 70),
    # Documentation
    (re.compile(r"\.md$", re.I), 30),
    (re.compile(r"^docs/"), 25),
    # Package manifests
    (re.compile(r"^composer\.json$"), 55),
    (re.compile(r"^package\.json$"), 55),
    (re.compile(r"^pyproject\.toml$"), 55),
    (re.compile(r"^composer\.lock$"), 20),
    (re.compile(r"^package-lock\.json$"), 15),
    (re.compile(r"^yarn\.lock$"), 15),
    (re.compile(r"^pnpm-lock\.yaml$"), 15),
    # Build and tooling
    (re.compile(r"^\.github/"), 35),
    (re.compile(r"^\.circleci/"), 35),
    (re.compile(r"^Dockerfile"), 40),
    (re.compile(r"^docker-compose"), 40),
    (re.compile(r"phpstan\."), 30),
    (re.compile(r"phpunit\."), 30),
    (re.compile(r"eslint"), 25),
    (re.compile(r"prettier"), 20),
]

DEFAULT_PATTERN_SCORE = 50


class RelevanceFilter(ContextFilter):
    """Orders files most relevant first and keeps at most ``max_files``."""

    name = "relevance"
    order = 40

    def __init__(self, max_files: int = None):
        self.max_files = settings.context.max_files if max_files is None else max_files

    def filter(self, bag: ContextBag) -> None:
        if not bag.files:
            return

        # sorted() is stable, so equal scores keep their original order
        ranked = sorted(bag.files, key=lambda file: -self.score(file))
        bag.files = ranked[:self.max_files]
        bag.recalculate_metrics()

    @staticmethod
    def pattern_score(filename: str) -> int:
        for pattern, score in PRIORITY_PATTERNS:
            if pattern.search(filename):
                return score
        return DEFAULT_PATTERN_SCORE

    def score(self, file: ChangedFile) -> int:
        changes = file.additions + file.deletions
        change_boost = int(min(30, math.log2(changes + 1) * 5))
        small_change_penalty = -10 if changes <= 2 else 0
        patch_boost = 15 if file.patch is not None else 0
        return self.pattern_score(file.filename) + change_boost + small_change_penalty + patch_boost
