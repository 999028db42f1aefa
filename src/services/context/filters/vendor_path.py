from src.models.schemas.pr_review.context_bag import ContextBag
from src.services.context.contracts import ContextFilter

VENDOR_PREFIXES = (
    "vendor/",
    "node_modules/",
    "bower_components/",
    ".git/",
    "storage/",
    "dist/",
    "build/",
    "public/build/",
    "public/hot/",
    ".next/",
    ".nuxt/",
    ".cache/",
    "bootstrap/cache/",
    "coverage/",
    "__pycache__/",
    ".venv/",
)


class VendorPathFilter(ContextFilter):
    """Drops dependency, build output and cache directories from the file list."""

    name = "vendor_path"
    order = 10

    def filter(self, bag: ContextBag) -> None:
        bag.files = [file for file in bag.files if not self.is_vendor_path(file.filename)]
        bag.recalculate_metrics()

    @staticmethod
    def is_vendor_path(path: str) -> bool:
        path = path.lstrip("/")
        return path.startswith(VENDOR_PREFIXES) or "/__pycache__/" in path
