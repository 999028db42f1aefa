from typing import List

from src.models.schemas.pr_review.context_bag import ContextBag, ContextSection
from src.models.schemas.pr_review.pr_patch import ChangeType, ChangedFile
from src.services.context.collectors.helpers import fetch_text, head_sha
from src.services.context.contracts import (
    BuildParams,
    ContextCollector,
    FileContentSource,
    has_review_target,
    split_repository,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = frozenset({
    "php", "js", "ts", "jsx", "tsx", "vue", "svelte",
    "py", "rb", "go", "rs", "java", "kt", "scala",
    "cs", "cpp", "c", "h", "hpp",
    "swift", "dart", "ex", "exs",
    "yaml", "yml", "json", "xml", "toml",
    "sql", "graphql", "gql",
    "sh", "bash", "zsh",
    "md", "mdx", "txt",
})


class FileContextCollector(ContextCollector):
    """Fetches full head-revision contents of the most-changed source files."""

    name = "file_context"
    priority = 85

    MAX_FILES = 10
    MAX_FILE_SIZE = 50000

    def __init__(self, source: FileContentSource):
        self.source = source

    def should_collect(self, params: BuildParams) -> bool:
        return has_review_target(params)

    def collect(self, bag: ContextBag, params: BuildParams) -> None:
        ref = head_sha(bag, params)
        if ref is None:
            logger.debug("FileContextCollector: No head SHA available")
            return

        files = self.select_files(bag.files)
        if not files:
            logger.debug(f"FileContextCollector: No suitable files among {len(bag.files)}")
            return

        owner, repo = split_repository(params)
        contents = {}
        for file in files:
            content = fetch_text(self.source, owner, repo, file.filename, ref=ref, max_size=self.MAX_FILE_SIZE)
            if content is not None:
                contents[file.filename] = content

        bag.set_section(ContextSection.FILE_CONTENTS, contents)

        logger.info(
            "FileContextCollector: Collected file contents",
            extra={"files_fetched": len(contents), "files_requested": len(files)},
        )

    def select_files(self, files: List[ChangedFile]) -> List[ChangedFile]:
        candidates = [
            file for file in files
            if file.status != ChangeType.REMOVED and file.extension in ALLOWED_EXTENSIONS
        ]
        candidates.sort(key=lambda file: file.changes, reverse=True)
        return candidates[:self.MAX_FILES]
