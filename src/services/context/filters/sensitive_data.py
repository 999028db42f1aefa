from typing import Any, List

from src.models.schemas.pr_review.context_bag import ContextBag
from src.models.schemas.pr_review.impacted_file import ImpactedFile
from src.services.context.contracts import ContextFilter
from src.services.context.sensitive_data_redactor import SensitiveDataRedactor
from src.utils.logging import get_logger

logger = get_logger(__name__)

SENSITIVE_FILE_PLACEHOLDER = "[REDACTED - sensitive file]"


class SensitiveDataFilter(ContextFilter):
    """
    Redacts secrets from everything that will reach the model.

    Patches of well-known secret files (``.env``, key files, ...) and of files
    marked sensitive by path configuration are replaced wholesale; other
    patches, the PR body and every text value in the sections are scanned
    for secret patterns.
    """

    name = "sensitive_data"
    order = 30

    def __init__(self, redactor: SensitiveDataRedactor = None):
        self.redactor = redactor or SensitiveDataRedactor()

    def filter(self, bag: ContextBag) -> None:
        counter: List[int] = [0]

        for file in bag.files:
            if file.patch is None:
                continue
            if file.is_sensitive or self.redactor.is_sensitive_file(file.filename):
                file.patch = SENSITIVE_FILE_PLACEHOLDER
                counter[0] += 1
                continue
            file.patch = self._redact_text(file.patch, counter)

        body = bag.pull_request.get("body")
        if isinstance(body, str):
            bag.pull_request["body"] = self._redact_text(body, counter)

        for name, value in list(bag.sections.items()):
            bag.sections[name] = self._redact_value(value, counter)

        if counter[0]:
            logger.info(
                "SensitiveDataFilter: Redacted sensitive data",
                extra={"redacted_count": counter[0]},
            )

    def _redact_text(self, text: str, counter: List[int]) -> str:
        redacted = self.redactor.redact(text)
        if redacted != text:
            counter[0] += 1
        return redacted

    def _redact_value(self, value: Any, counter: List[int]) -> Any:
        if isinstance(value, str):
            return self._redact_text(value, counter)
        if isinstance(value, ImpactedFile):
            return value.model_copy(update={"content": self._redact_text(value.content, counter)})
        if isinstance(value, dict):
            return {key: self._redact_value(item, counter) for key, item in value.items()}
        if isinstance(value, list):
            return [self._redact_value(item, counter) for item in value]
        return value
