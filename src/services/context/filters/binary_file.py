import posixpath

from src.models.schemas.pr_review.context_bag import ContextBag
from src.services.context.contracts import ContextFilter

EXCLUDED_EXTENSIONS = frozenset({
    # Images
    "png", "jpg", "jpeg", "gif", "webp", "ico", "svg", "bmp", "tiff",
    # Documents
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    # Archives
    "zip", "tar", "gz", "rar", "7z",
    # Binaries
    "exe", "dll", "so", "dylib",
    # Fonts
    "woff", "woff2", "ttf", "eot", "otf",
    # Media
    "mp3", "mp4", "wav", "avi", "mov",
    # Lock files and source maps
    "lock", "map",
})

EXCLUDED_FILENAMES = frozenset({
    "package-lock.json",
    "composer.lock",
    "yarn.lock",
    "pnpm-lock.yaml",
    "Cargo.lock",
    "Gemfile.lock",
    "poetry.lock",
    ".DS_Store",
    "Thumbs.db",
})

MINIFIED_SUFFIXES = (".min.js", ".min.css")


class BinaryFileFilter(ContextFilter):
    """Removes binary, generated, minified and lock files from the file list."""

    name = "binary_file"
    order = 20

    def filter(self, bag: ContextBag) -> None:
        bag.files = [file for file in bag.files if not self.should_exclude(file.filename)]
        bag.recalculate_metrics()

    @staticmethod
    def should_exclude(path: str) -> bool:
        filename = posixpath.basename(path)
        if filename in EXCLUDED_FILENAMES:
            return True

        extension = posixpath.splitext(filename)[1].lstrip(".").lower()
        if extension in EXCLUDED_EXTENSIONS:
            return True

        return path.lower().endswith(MINIFIED_SUFFIXES)
