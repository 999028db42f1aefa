"""
Token Limit Filter

Keeps the assembled context inside the model's token budget. Runs last.

The budget comes from ``metadata["context_token_budget"]`` (never below the
configured minimum). Each section gets a share of the budget; anything still
over budget afterwards is removed section by section, lowest value first.
Changed files are never removed, only their patches are shortened.
"""

import json
import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.core.config import settings
from src.models.schemas.pr_review.context_bag import ContextBag, ContextSection
from src.models.schemas.pr_review.impacted_file import ImpactedFile
from src.models.schemas.pr_review.pr_patch import ChangedFile
from src.services.context.contracts import ContextFilter
from src.services.context.token_counting import HeuristicTokenCounter, TokenCounter
from src.utils.logging import get_logger

logger = get_logger(__name__)

RATIO_FILES_TOTAL = 0.45
RATIO_FILES_PER = 0.08
RATIO_IMPACTED_FILES = 0.12
RATIO_IMPACTED_FILE_SINGLE = 0.25
RATIO_ISSUES = 0.08
RATIO_COMMENTS = 0.04
RATIO_GUIDELINES = 0.06
RATIO_REPOSITORY_CONTEXT = 0.05
RATIO_REVIEW_HISTORY = 0.05
RATIO_PROJECT_CONTEXT = 0.03
RATIO_FILE_CONTENTS = 0.10
RATIO_FILE_CONTENTS_SINGLE = 0.20
RATIO_SEMANTICS = 0.05

MAX_FILES_TOTAL = 150000
MAX_FILES_PER = 20000
MAX_IMPACTED_FILES = 40000
MAX_FILE_CONTENTS = 30000
MAX_SEMANTICS = 15000

IMPACTED_FILE_METADATA_TOKENS = 50
OMITTED_PATCH_TOKENS = 50
AGGRESSIVE_MAX_FILES_WITH_PATCHES = 15
AGGRESSIVE_MAX_PATCH_CHARS = 2000


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TokenLimitFilter(ContextFilter):
    name = "token_limit"
    order = 100

    def __init__(
        self,
        token_counter: Optional[TokenCounter] = None,
        default_max_tokens: int = None,
        min_context_tokens: int = None,
        min_section_tokens: int = None,
    ):
        limits = settings.context
        self.token_counter = token_counter or HeuristicTokenCounter()
        self.default_max_tokens = (
            limits.default_max_context_tokens if default_max_tokens is None else default_max_tokens
        )
        self.min_context_tokens = limits.min_context_tokens if min_context_tokens is None else min_context_tokens
        self.min_section_tokens = limits.min_section_tokens if min_section_tokens is None else min_section_tokens

    def filter(self, bag: ContextBag) -> None:
        initial_tokens = self._bag_tokens(bag)
        max_tokens = self.resolve_max_context_tokens(bag)
        budgets = self.resolve_budgets(max_tokens)

        bag.files = self._truncate_files(bag.files, budgets["files_per"], budgets["files_total"])

        self._apply(bag, ContextSection.IMPACTED_FILES, self._truncate_impacted_files, budgets["impacted_files"])
        self._apply(bag, ContextSection.FILE_CONTENTS, self._truncate_file_contents, budgets["file_contents"])
        self._apply(bag, ContextSection.SEMANTICS, self._truncate_semantics, budgets["semantics"])
        self._apply(bag, ContextSection.LINKED_ISSUES, self._truncate_linked_issues, budgets["issues"])
        self._apply(bag, ContextSection.PR_COMMENTS, self._truncate_pr_comments, budgets["comments"])
        self._apply(bag, ContextSection.GUIDELINES, self._truncate_guidelines, budgets["guidelines"])
        self._apply(
            bag,
            ContextSection.REPOSITORY_CONTEXT,
            self._truncate_repository_context,
            budgets["repository_context"],
        )
        self._apply(bag, ContextSection.REVIEW_HISTORY, self._truncate_review_history, budgets["review_history"])
        self._apply(bag, ContextSection.PROJECT_CONTEXT, self._truncate_project_context, budgets["project_context"])

        if self._bag_tokens(bag) > max_tokens:
            self._progressive_truncation(bag, max_tokens)

        final_tokens = self._bag_tokens(bag)
        if final_tokens != initial_tokens:
            logger.info(
                "TokenLimitFilter: Truncated context",
                extra={
                    "initial_tokens": initial_tokens,
                    "final_tokens": final_tokens,
                    "reduction": initial_tokens - final_tokens,
                    "max_tokens": max_tokens,
                },
            )

    def resolve_max_context_tokens(self, bag: ContextBag) -> int:
        budget = bag.metadata.get("context_token_budget")

        if isinstance(budget, bool):
            return self.default_max_tokens
        if isinstance(budget, int) and budget > 0:
            return max(budget, self.min_context_tokens)
        if isinstance(budget, str) and budget.strip().isdigit():
            return max(int(budget.strip()), self.min_context_tokens)

        return self.default_max_tokens

    def resolve_budgets(self, max_tokens: int) -> Dict[str, int]:
        budgets = {
            "files_total": self._scale(max_tokens, RATIO_FILES_TOTAL, MAX_FILES_TOTAL),
            "files_per": self._scale(max_tokens, RATIO_FILES_PER, MAX_FILES_PER),
            "impacted_files": self._scale(max_tokens, RATIO_IMPACTED_FILES, MAX_IMPACTED_FILES),
            "file_contents": self._scale(max_tokens, RATIO_FILE_CONTENTS, MAX_FILE_CONTENTS),
            "semantics": self._scale(max_tokens, RATIO_SEMANTICS, MAX_SEMANTICS),
            "issues": self._scale(max_tokens, RATIO_ISSUES),
            "comments": self._scale(max_tokens, RATIO_COMMENTS),
            "guidelines": self._scale(max_tokens, RATIO_GUIDELINES),
            "repository_context": self._scale(max_tokens, RATIO_REPOSITORY_CONTEXT),
            "review_history": self._scale(max_tokens, RATIO_REVIEW_HISTORY),
            "project_context": self._scale(max_tokens, RATIO_PROJECT_CONTEXT),
        }
        budgets["files_per"] = min(budgets["files_per"], budgets["files_total"])
        return budgets

    def _scale(self, max_tokens: int, ratio: float, cap: Optional[int] = None) -> int:
        scaled = max(_round_half_up(max_tokens * ratio), self.min_section_tokens)
        return min(scaled, cap) if cap is not None else scaled

    def _apply(self, bag: ContextBag, section: ContextSection, truncate: Callable, budget: int) -> None:
        value = bag.get_section(section)
        if value:
            bag.set_section(section, truncate(value, budget))

    # ------------------------------------------------------------------
    # Text helpers
    # ------------------------------------------------------------------

    def _tokens(self, text: Optional[str]) -> int:
        return self.token_counter.count(text or "")

    def _bag_tokens(self, bag: ContextBag) -> int:
        return bag.estimate_tokens(self.token_counter)

    def truncate_text(self, text: str, max_tokens: int, suffix: str) -> str:
        if self._tokens(text) <= max_tokens:
            return text
        budget = max(max_tokens - self._tokens(suffix), 0)
        return self._trim_to_budget(text, budget) + suffix

    def _trim_to_budget(self, text: str, max_tokens: int) -> str:
        if max_tokens <= 0:
            return ""

        low, high = 0, len(text)
        while low < high:
            mid = (low + high + 1) // 2
            if self._tokens(text[:mid]) <= max_tokens:
                low = mid
            else:
                high = mid - 1
        return text[:low]

    # ------------------------------------------------------------------
    # Per-section truncation
    # ------------------------------------------------------------------

    def _truncate_files(self, files: List[ChangedFile], max_per_file: int, max_total: int) -> List[ChangedFile]:
        total = 0
        for file in files:
            patch = file.patch
            if patch is None:
                continue

            patch_tokens = self._tokens(patch)
            if patch_tokens > max_per_file:
                file.patch = self.truncate_text(patch, max_per_file, "\n... [truncated - file too large]")
                patch_tokens = max_per_file

            if total + patch_tokens > max_total:
                remaining = max_total - total
                if remaining > self.min_section_tokens:
                    file.patch = self.truncate_text(patch, remaining, "\n... [truncated - token limit]")
                    patch_tokens = remaining
                else:
                    file.patch = "[patch omitted - token limit reached]"
                    patch_tokens = OMITTED_PATCH_TOKENS

            total += patch_tokens
        return files

    def _truncate_impacted_files(self, impacted: List[Any], max_tokens: int) -> List[Any]:
        result = []
        total = 0
        max_per_file = int(max_tokens * RATIO_IMPACTED_FILE_SINGLE)

        for item in impacted:
            content = _item_content(item)
            file_tokens = self._tokens(content) + IMPACTED_FILE_METADATA_TOKENS

            if file_tokens > max_per_file:
                content = self.truncate_text(
                    content,
                    max_per_file - IMPACTED_FILE_METADATA_TOKENS,
                    "\n... [truncated - impacted file too large]",
                )
                item = _with_content(item, content)
                file_tokens = max_per_file

            if total + file_tokens > max_tokens:
                remaining = max_tokens - total
                if remaining > self.min_section_tokens:
                    content = self.truncate_text(
                        content,
                        remaining - IMPACTED_FILE_METADATA_TOKENS,
                        "\n... [truncated - token limit]",
                    )
                    result.append(_with_content(item, content))
                break

            result.append(item)
            total += file_tokens
        return result

    def _truncate_file_contents(self, contents: Dict[str, str], max_tokens: int) -> Dict[str, str]:
        result: Dict[str, str] = {}
        total = 0
        max_per_file = int(max_tokens * RATIO_FILE_CONTENTS_SINGLE)

        for path, content in contents.items():
            content_tokens = self._tokens(content)
            if content_tokens > max_per_file:
                content = self.truncate_text(content, max_per_file, "\n... [truncated - file too large]")
                content_tokens = max_per_file

            if total + content_tokens > max_tokens:
                remaining = max_tokens - total
                if remaining > self.min_section_tokens:
                    result[path] = self.truncate_text(content, remaining, "\n... [truncated - token limit]")
                break

            result[path] = content
            total += content_tokens
        return result

    def _truncate_semantics(self, semantics: Dict[str, Dict[str, Any]], max_tokens: int) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        total = 0

        for path, data in semantics.items():
            data_tokens = self._tokens(json.dumps(data, default=str))
            if total + data_tokens > max_tokens:
                remaining = max_tokens - total
                if remaining > self.min_section_tokens:
                    reduced = self._reduce_semantic_data(data, remaining)
                    if reduced:
                        result[path] = reduced
                break

            result[path] = data
            total += data_tokens
        return result

    def _reduce_semantic_data(self, data: Dict[str, Any], max_tokens: int) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if "language" in data:
            result["language"] = data["language"]
        if isinstance(data.get("functions"), list):
            result["functions"] = data["functions"][:5]
        if isinstance(data.get("classes"), list):
            result["classes"] = [
                {**cls, "methods": cls["methods"][:5]} if isinstance(cls.get("methods"), list) else cls
                for cls in data["classes"][:3]
            ]
        if isinstance(data.get("imports"), list):
            result["imports"] = data["imports"][:5]

        if self._tokens(json.dumps(result, default=str)) > max_tokens:
            return {
                "language": data.get("language", "unknown"),
                "functions": list(data.get("functions") or [])[:2],
                "classes": list(data.get("classes") or [])[:1],
            }
        return result

    def _truncate_linked_issues(self, issues: List[Dict[str, Any]], max_tokens: int) -> List[Dict[str, Any]]:
        result = []
        total = 0

        for issue in issues:
            issue_tokens = self._issue_tokens(issue)
            if total + issue_tokens > max_tokens:
                if total < max_tokens - self.min_section_tokens:
                    # Reserve room for the issue's title and labels
                    remaining = max_tokens - total - 200
                    result.append(self._shorten_issue(issue, remaining))
                break

            result.append(issue)
            total += issue_tokens
        return result

    def _issue_tokens(self, issue: Dict[str, Any]) -> int:
        tokens = self._tokens(issue.get("title")) + self._tokens(issue.get("body"))
        for comment in issue.get("comments") or []:
            tokens += self._tokens(comment.get("body"))
        return tokens

    def _shorten_issue(self, issue: Dict[str, Any], max_tokens: int) -> Dict[str, Any]:
        issue = dict(issue)
        body = issue.get("body")
        if body is not None and self._tokens(body) > max_tokens / 2:
            issue["body"] = self.truncate_text(body, int(max_tokens / 2), "... [truncated]")
        issue["comments"] = list(issue.get("comments") or [])[:3]
        return issue

    def _truncate_pr_comments(self, comments: List[Dict[str, Any]], max_tokens: int) -> List[Dict[str, Any]]:
        result = []
        total = 0
        for comment in comments:
            comment_tokens = self._tokens(comment.get("body"))
            if total + comment_tokens > max_tokens:
                break
            result.append(comment)
            total += comment_tokens
        return result

    def _truncate_guidelines(self, guidelines: List[Dict[str, Any]], max_tokens: int) -> List[Dict[str, Any]]:
        result = []
        total = 0

        for guideline in guidelines:
            guideline_tokens = self._tokens(guideline.get("content")) + self._tokens(guideline.get("description"))
            if total + guideline_tokens > max_tokens:
                remaining = max_tokens - total
                if remaining > self.min_section_tokens:
                    result.append({
                        **guideline,
                        "content": self.truncate_text(
                            guideline.get("content") or "",
                            remaining,
                            "... [truncated - guideline too long]",
                        ),
                    })
                break

            result.append(guideline)
            total += guideline_tokens
        return result

    def _truncate_repository_context(self, context: Dict[str, Optional[str]], max_tokens: int) -> Dict[str, Any]:
        context = dict(context)
        total = 0

        # CONTRIBUTING is more actionable for a review than the README
        for key in ("contributing", "readme"):
            content = context.get(key)
            if content is None:
                continue

            content_tokens = self._tokens(content)
            if total + content_tokens > max_tokens:
                remaining = max_tokens - total
                if remaining > self.min_section_tokens:
                    context[key] = self.truncate_text(
                        content,
                        remaining,
                        "... [truncated - repository context too long]",
                    )
                    total = max_tokens
                else:
                    del context[key]
                continue

            total += content_tokens
        return context

    def _truncate_review_history(self, reviews: List[Dict[str, Any]], max_tokens: int) -> List[Dict[str, Any]]:
        result = []
        total = 0

        for review in reviews:
            review_tokens = self._tokens(review.get("summary")) + self._tokens(
                json.dumps(review.get("key_findings") or [], default=str)
            )
            if total + review_tokens > max_tokens:
                remaining = max_tokens - total
                if remaining > self.min_section_tokens:
                    result.append({
                        **review,
                        "summary": self.truncate_text(
                            review.get("summary") or "",
                            remaining,
                            "... [truncated - review history too long]",
                        ),
                        "key_findings": list(review.get("key_findings") or [])[:5],
                    })
                break

            result.append(review)
            total += review_tokens
        return result

    def _truncate_project_context(self, context: Dict[str, Any], max_tokens: int) -> Dict[str, Any]:
        context = dict(context)
        for key, keep in (("dependencies", 10), ("frameworks", 3), ("languages", 3)):
            if self._tokens(json.dumps(context, default=str)) <= max_tokens:
                break
            if isinstance(context.get(key), list):
                context[key] = context[key][:keep]
        return context

    # ------------------------------------------------------------------
    # Progressive truncation
    # ------------------------------------------------------------------

    def _progressive_truncation(self, bag: ContextBag, max_tokens: int) -> None:
        """Shrink or drop sections from least to most valuable until under budget."""
        steps: List[Tuple[str, Callable[[ContextBag], None]]] = [
            ("drop review history", lambda b: b.drop_section(ContextSection.REVIEW_HISTORY)),
            ("drop repository context", lambda b: b.drop_section(ContextSection.REPOSITORY_CONTEXT)),
            ("drop project context", lambda b: b.drop_section(ContextSection.PROJECT_CONTEXT)),
            ("keep 5 PR comments", lambda b: _slice_section(b, ContextSection.PR_COMMENTS, 5)),
            ("drop PR comments", lambda b: b.drop_section(ContextSection.PR_COMMENTS)),
            ("keep 5 semantic entries", lambda b: _slice_section(b, ContextSection.SEMANTICS, 5)),
            ("drop semantics", lambda b: b.drop_section(ContextSection.SEMANTICS)),
            ("keep 2 linked issues", lambda b: _slice_section(b, ContextSection.LINKED_ISSUES, 2)),
            ("drop linked issues", lambda b: b.drop_section(ContextSection.LINKED_ISSUES)),
            ("keep 3 file contents", lambda b: _slice_section(b, ContextSection.FILE_CONTENTS, 3)),
            ("drop file contents", lambda b: b.drop_section(ContextSection.FILE_CONTENTS)),
            ("keep 5 impacted files", lambda b: _slice_section(b, ContextSection.IMPACTED_FILES, 5)),
            ("drop impacted files", lambda b: b.drop_section(ContextSection.IMPACTED_FILES)),
            ("keep 1 guideline", lambda b: _slice_section(b, ContextSection.GUIDELINES, 1)),
            ("truncate patches", self._aggressive_truncate_files),
        ]

        for description, step in steps:
            if self._bag_tokens(bag) <= max_tokens:
                return
            logger.debug(f"TokenLimitFilter: Over budget, {description}")
            step(bag)

    @staticmethod
    def _aggressive_truncate_files(bag: ContextBag) -> None:
        with_patches = 0
        for file in bag.files:
            if not file.patch:
                continue
            with_patches += 1
            if with_patches > AGGRESSIVE_MAX_FILES_WITH_PATCHES:
                file.patch = "[patch omitted - too many files]"
            elif len(file.patch) > AGGRESSIVE_MAX_PATCH_CHARS:
                file.patch = file.patch[:AGGRESSIVE_MAX_PATCH_CHARS] + "\n... [aggressively truncated]"


def _slice_section(bag: ContextBag, section: ContextSection, keep: int) -> None:
    value = bag.get_section(section)
    if isinstance(value, list):
        bag.set_section(section, value[:keep])
    elif isinstance(value, dict):
        bag.set_section(section, dict(list(value.items())[:keep]))


def _item_content(item: Any) -> str:
    if isinstance(item, ImpactedFile):
        return item.content
    return str(item.get("content") or "")


def _with_content(item: Any, content: str) -> Any:
    if isinstance(item, ImpactedFile):
        return item.model_copy(update={"content": content})
    return {**item, "content": content}
