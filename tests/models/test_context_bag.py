"""
Unit tests for ContextBag sections, metrics and token estimation.
"""

import json
import math

from src.models.schemas.pr_review.context_bag import ContextBag, ContextSection, text_length
from src.models.schemas.pr_review.impacted_file import ImpactedFile
from src.models.schemas.pr_review.pr_patch import ChangedFile
from src.services.context.token_counting import HeuristicTokenCounter


class TestContextBagSections:

    def test_new_bag_is_empty(self):
        bag = ContextBag()
        assert bag.files == []
        assert bag.sections == {}
        assert bag.metadata == {}

    def test_set_and_get_by_enum_or_name(self):
        bag = ContextBag()
        bag.set_section(ContextSection.GUIDELINES, [{"path": "docs/style.md"}])

        assert bag.get_section("guidelines") == [{"path": "docs/style.md"}]
        assert bag.has_section(ContextSection.GUIDELINES)

    def test_has_section_is_false_for_empty_values(self):
        bag = ContextBag()
        bag.set_section(ContextSection.FILE_CONTENTS, {})
        assert not bag.has_section(ContextSection.FILE_CONTENTS)

    def test_drop_section(self):
        bag = ContextBag(sections={"semantics": {"a.py": {}}})
        bag.drop_section(ContextSection.SEMANTICS)
        bag.drop_section(ContextSection.SEMANTICS)
        assert "semantics" not in bag.sections

    def test_get_file(self, make_bag):
        bag = make_bag([("src/a.py", "+x"), ("src/b.py", None)])
        assert bag.get_file("src/b.py").patch is None
        assert bag.get_file("missing.py") is None
        assert bag.filenames() == ["src/a.py", "src/b.py"]


class TestContextBagMetrics:

    def test_recalculate_metrics(self):
        bag = ContextBag(files=[
            ChangedFile(filename="a.py", additions=3, deletions=1),
            ChangedFile(filename="b.py", additions=2, deletions=5),
        ])
        bag.recalculate_metrics()

        assert bag.metrics == {"files_changed": 2, "lines_added": 5, "lines_deleted": 6}

    def test_files_with_patch_count(self, make_bag):
        bag = make_bag([("a.py", "+x"), ("b.png", None), ("c.py", "")])
        assert bag.files_with_patch_count() == 2


class TestTokenEstimation:

    def test_text_length_counts_nested_strings(self):
        value = {"a": "abc", "b": ["de", {"c": "f"}], "d": None}
        assert text_length(value) == 6

    def test_text_length_of_models(self):
        impacted = ImpactedFile(file_path="x.py", content="abcd", matched_symbol="s")
        assert text_length([impacted]) >= len("x.py") + len("abcd")

    def test_estimate_includes_every_part(self, make_bag):
        bag = make_bag([("a.py", "+" * 100)])
        bag.pull_request = {"title": "T"}
        bag.set_section(ContextSection.FILE_CONTENTS, {"a.py": "x" * 40})

        expected_chars = (
            len(json.dumps(bag.pull_request))
            + len("a.py") + 100
            + len(json.dumps(bag.metrics))
            + 40
        )
        assert bag.total_chars() == expected_chars
        assert bag.estimate_tokens() == math.ceil(expected_chars * 0.25)

    def test_estimate_with_counter(self, make_bag):
        bag = make_bag([("a.py", "+" * 100)])
        assert bag.estimate_tokens(HeuristicTokenCounter(1.0)) == bag.total_chars()

    def test_estimate_grows_with_sections(self):
        bag = ContextBag()
        before = bag.estimate_tokens()
        bag.set_section(ContextSection.REPOSITORY_CONTEXT, {"readme": "r" * 400})
        assert bag.estimate_tokens() == before + 100


def test_to_dict_serializes_sections():
    bag = ContextBag(metadata={"context_token_budget": 9000})
    bag.set_section(
        ContextSection.IMPACTED_FILES,
        [ImpactedFile(file_path="x.py", matched_symbol="run", match_type="function_call")],
    )

    data = bag.to_dict()

    assert data["metadata"] == {"context_token_budget": 9000}
    assert data["impacted_files"][0]["reason"] == "Calls function `run()`"
