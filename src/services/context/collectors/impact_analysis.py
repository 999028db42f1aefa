"""
Impact Analysis Collector

Finds files outside the pull request that reference symbols the pull request
modifies. A symbol counts as modified when its line range (from semantic
analysis) contains a line added by the patch. Each modified symbol is turned
into a few keyword searches; hits are deduplicated per file and symbol,
ranked, and the top files are fetched in full.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from src.core.config import ImpactAnalysisConfig, settings
from src.models.schemas.pr_review.context_bag import ContextBag, ContextSection
from src.models.schemas.pr_review.impacted_file import ImpactedFile
from src.services.context.collectors.helpers import fetch_text, head_sha
from src.services.context.contracts import (
    BuildParams,
    CodeSearchSource,
    ContextCollector,
    FileContentSource,
    has_review_target,
    split_repository,
)
from src.services.diff_parsing import DiffParsingError, UnifiedDiffParser
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ModifiedSymbol:
    name: str
    kind: str  # function, class or method
    file: str


def search_patterns(symbol: ModifiedSymbol) -> List[Tuple[str, str]]:
    """``(query, match_type)`` pairs used to find references to a symbol."""
    name = symbol.name
    if symbol.kind == "function":
        return [(f"{name}(", "function_call")]
    if symbol.kind == "class":
        return [
            (f"new {name}", "class_instantiation"),
            (f"extends {name}", "extends"),
            (f"implements {name}", "implements"),
        ]
    if symbol.kind == "method":
        return [
            (f"->{name}(", "method_call"),
            (f"::{name}(", "method_call"),
            (f".{name}(", "method_call"),
        ]
    return [(name, "reference")]


def _overlaps(entry: Dict[str, Any], lines: Set[int]) -> bool:
    start = entry.get("line_start")
    if not isinstance(start, int):
        return False
    end = entry.get("line_end")
    if not isinstance(end, int):
        end = start
    return any(start <= line <= end for line in lines)


def _named(entries: Any) -> Iterable[Dict[str, Any]]:
    for entry in entries if isinstance(entries, list) else []:
        if isinstance(entry, dict) and isinstance(entry.get("name"), str) and entry["name"]:
            yield entry


def _score(result: Dict[str, Any]) -> float:
    try:
        return float(result.get("score", 0.0))
    except (TypeError, ValueError):
        return 0.0


class ImpactAnalysisCollector(ContextCollector):
    name = "impact_analysis"
    priority = 75

    def __init__(
        self,
        search: CodeSearchSource,
        source: FileContentSource,
        config: Optional[ImpactAnalysisConfig] = None,
        diff_parser: Optional[UnifiedDiffParser] = None,
    ):
        self.search = search
        self.source = source
        self.config = config or settings.impact_analysis
        self.diff_parser = diff_parser or UnifiedDiffParser()

    def should_collect(self, params: BuildParams) -> bool:
        return has_review_target(params)

    def collect(self, bag: ContextBag, params: BuildParams) -> None:
        if not bag.has_section(ContextSection.SEMANTICS):
            logger.debug("ImpactAnalysisCollector: No semantic data available")
            return

        symbols = self.extract_modified_symbols(bag)
        if not symbols:
            logger.debug("ImpactAnalysisCollector: No modified symbols found")
            return

        to_search = symbols[:self.config.max_symbols]
        logger.debug(
            "ImpactAnalysisCollector: Searching for references",
            extra={"symbols_count": len(to_search), "total_modified": len(symbols)},
        )

        owner, repo = split_repository(params)
        candidates = self.find_candidates(owner, repo, to_search, exclude=set(bag.filenames()))
        impacted = self._fetch_impacted_files(owner, repo, candidates, head_sha(bag, params))

        if not impacted:
            logger.debug("ImpactAnalysisCollector: No impacted files found")
            return

        bag.set_section(ContextSection.IMPACTED_FILES, impacted)

        logger.info(
            "ImpactAnalysisCollector: Found impacted files",
            extra={
                "repository": params["repository"],
                "symbols_searched": len(to_search),
                "impacted_files": len(impacted),
            },
        )

    def extract_modified_symbols(self, bag: ContextBag) -> List[ModifiedSymbol]:
        symbols: List[ModifiedSymbol] = []

        for path, data in (bag.get_section(ContextSection.SEMANTICS) or {}).items():
            file = bag.get_file(path)
            if file is None or file.patch is None or not isinstance(data, dict):
                continue

            try:
                lines = self.diff_parser.changed_lines(file.patch, path)
            except DiffParsingError as e:
                logger.warning(f"ImpactAnalysisCollector: Skipping {path}, unparseable patch: {e}")
                continue

            for function in _named(data.get("functions")):
                if _overlaps(function, lines):
                    symbols.append(ModifiedSymbol(function["name"], "function", path))

            for cls in _named(data.get("classes")):
                if _overlaps(cls, lines):
                    symbols.append(ModifiedSymbol(cls["name"], "class", path))
                for method in _named(cls.get("methods")):
                    if _overlaps(method, lines):
                        symbols.append(ModifiedSymbol(method["name"], "method", path))

        return symbols

    def find_candidates(
        self,
        owner: str,
        repo: str,
        symbols: List[ModifiedSymbol],
        exclude: Set[str],
    ) -> List[Dict[str, Any]]:
        """Search hits grouped per (file, symbol), best first, capped at ``max_files``."""
        candidates: Dict[str, Dict[str, Any]] = {}

        for symbol in symbols:
            for query, match_type in search_patterns(symbol):
                results = self.search.search_code(owner, repo, query, limit=self.config.search_limit_per_symbol)
                for result in results:
                    file_path = result.get("file_path")
                    if not file_path or file_path in exclude:
                        continue

                    score = _score(result)
                    if score < self.config.min_relevance_score:
                        continue

                    key = f"{file_path}:{symbol.name}"
                    candidate = candidates.get(key)
                    if candidate is None:
                        candidates[key] = {
                            "file_path": file_path,
                            "matched_symbol": symbol.name,
                            "match_type": match_type,
                            "score": score,
                            "match_count": 1,
                            "content": result.get("content") or "",
                        }
                    else:
                        candidate["match_count"] += 1
                        candidate["score"] = max(candidate["score"], score)

        ranked = sorted(candidates.values(), key=lambda c: (-c["match_count"], -c["score"]))
        return ranked[:self.config.max_files]

    def _fetch_impacted_files(
        self,
        owner: str,
        repo: str,
        candidates: List[Dict[str, Any]],
        ref: Optional[str],
    ) -> List[ImpactedFile]:
        impacted = []
        for candidate in candidates:
            content = fetch_text(
                self.source, owner, repo, candidate["file_path"],
                ref=ref, max_size=self.config.max_file_size,
            )
            if content is None:
                continue
            impacted.append(ImpactedFile.from_dict({**candidate, "content": content}))
        return impacted
