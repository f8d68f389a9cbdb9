"""Behaviour of the codebase tools, invoked through the registry."""

import json

import pytest

from pycodebase.codebase.store import CodebaseStore
from pycodebase.tools.base import ErrorType, ToolContext
from pycodebase.tools.builtin import register_codebase_tools
from pycodebase.tools.registry import ToolRegistry

SEED = {
    "files": [
        {"path": "src/App.tsx", "content": "import { Button } from './components/Button';", "type": "tsx"},
        {"path": "src/components/Button.tsx", "content": "export const Button = () => <button/>;", "type": "tsx"},
        {"path": "src/auth/Login.tsx", "content": "// handles Authentication\nexport {}", "type": "tsx"},
        {"path": "src/auth/Auth.ts", "content": "export const authentication = true;", "type": "ts"},
        {"path": "srcfoo.ts", "content": "const notInSrc = 1;", "type": "ts"},
        {"path": "README.md", "content": "# Demo", "type": "md"},
    ]
}


class ToolHarness:

    def setup_method(self):
        self.store = CodebaseStore.from_payload(json.dumps(SEED))
        self.registry = ToolRegistry()
        register_codebase_tools(self.registry)
        self.ctx = ToolContext(store=self.store, user_id="u", organization_id="o")

    def call(self, name, args):
        return self.registry.invoke(name, args, self.ctx)


class TestListFiles(ToolHarness):

    def test_all_files_sorted(self):
        res = self.call("list_files", {})
        assert res.success
        assert res.output["files"] == sorted(p["path"] for p in SEED["files"])

    @pytest.mark.parametrize("directory", ["", ".", None])
    def test_root_aliases(self, directory):
        res = self.call("list_files", {"directory": directory})
        assert len(res.output["files"]) == len(SEED["files"])

    def test_directory_prefix_requires_separator(self):
        res = self.call("list_files", {"directory": "src"})
        assert "srcfoo.ts" not in res.output["files"]
        assert res.output["files"] == [
            "src/App.tsx",
            "src/auth/Auth.ts",
            "src/auth/Login.tsx",
            "src/components/Button.tsx",
        ]

    def test_trailing_slash_is_normalized(self):
        with_slash = self.call("list_files", {"directory": "src/auth/"}).output
        without = self.call("list_files", {"directory": "src/auth"}).output
        assert with_slash == without == {"files": ["src/auth/Auth.ts", "src/auth/Login.tsx"]}

    def test_exact_path_match(self):
        self.store.set_one("src", "odd but legal")
        res = self.call("list_files", {"directory": "src"})
        assert res.output["files"][0] == "src"

    def test_unknown_directory(self):
        assert self.call("list_files", {"directory": "nope"}).output == {"files": []}

    def test_text_output_is_json(self):
        res = self.call("list_files", {"directory": "src/components"})
        assert json.loads(res.to_text()) == {"files": ["src/components/Button.tsx"]}


class TestGetFilesContent(ToolHarness):

    def test_reads_files(self):
        res = self.call("get_files_content", {"filePaths": ["README.md", "src/auth/Auth.ts"]})
        assert res.output == [
            {"path": "README.md", "content": "# Demo", "error": None},
            {"path": "src/auth/Auth.ts", "content": "export const authentication = true;", "error": None},
        ]

    def test_partial_success(self):
        res = self.call("get_files_content", {"filePaths": ["README.md", "missing.js"]})
        assert res.success
        assert res.output[1] == {
            "path": "missing.js",
            "content": None,
            "error": "File not found in codebase: missing.js",
        }

    def test_empty_request(self):
        assert self.call("get_files_content", {"filePaths": []}).output == []

    def test_wrong_type_is_validation_error(self):
        res = self.call("get_files_content", {"filePaths": "README.md"})
        assert res.error.type is ErrorType.VALIDATION


class TestFindFilesWithText(ToolHarness):

    def test_case_insensitive_by_default(self):
        res = self.call("find_files_with_text", {"keyword": "authentication"})
        assert res.output == {
            "keyword": "authentication",
            "caseSensitive": False,
            "matchingFiles": ["src/auth/Auth.ts", "src/auth/Login.tsx"],
            "count": 2,
        }

    def test_case_sensitive(self):
        res = self.call("find_files_with_text", {"keyword": "Authentication", "caseSensitive": True})
        assert res.output["matchingFiles"] == ["src/auth/Login.tsx"]
        assert res.output["caseSensitive"] is True

    def test_directory_scope(self):
        res = self.call("find_files_with_text", {"keyword": "button", "directory": "src/components"})
        assert res.output["matchingFiles"] == ["src/components/Button.tsx"]
        assert res.output["count"] == 1

    def test_literal_not_regex(self):
        res = self.call("find_files_with_text", {"keyword": "() =>"})
        assert res.output["matchingFiles"] == ["src/components/Button.tsx"]

    def test_no_matches(self):
        res = self.call("find_files_with_text", {"keyword": "zzz"})
        assert res.output["matchingFiles"] == []
        assert res.output["count"] == 0


class TestWriteFiles(ToolHarness):

    def test_update_preserves_type(self):
        res = self.call("write_files", {"files": [{"filePath": "src/App.tsx", "fileContent": "new"}]})
        assert res.output == "Successfully updated file: src/App.tsx"
        f = self.store.get("src/App.tsx")
        assert f.content == "new"
        assert f.type == "tsx"

    def test_create_uses_default_type(self):
        res = self.call("write_files", {"files": [{"filePath": "src/New.tsx", "fileContent": "x"}]})
        assert res.output == "Successfully created file: src/New.tsx"
        assert self.store.get("src/New.tsx").type == "file"

    def test_one_line_per_file(self):
        res = self.call("write_files", {"files": [
            {"filePath": "README.md", "fileContent": "# Changed"},
            {"filePath": "docs/guide.md", "fileContent": "guide"},
        ]})
        assert res.output.splitlines() == [
            "Successfully updated file: README.md",
            "Successfully created file: docs/guide.md",
        ]

    def test_payload_shapes_give_identical_state(self):
        files = [
            {"filePath": "src/App.tsx", "fileContent": "const app = \"v2\";\n"},
            {"filePath": "src/new/util.ts", "fileContent": "export {}\n"},
        ]
        wrapped = {"files": files}
        states = []
        for payload in (json.dumps(wrapped), json.dumps(json.dumps(wrapped)), files):
            self.setup_method()
            res = self.call("write_files", {"files": payload})
            assert res.success, res.to_text()
            states.append(self.store.export())
        assert states[0] == states[1] == states[2]

    def test_batch_limit(self):
        files = [{"filePath": f"f{i}.ts", "fileContent": ""} for i in range(9)]
        res = self.call("write_files", {"files": files})
        assert res.success is False
        assert res.error.type is ErrorType.VALIDATION
        assert "9" in res.error.message and "8" in res.error.message
        assert "f0.ts" not in self.store

    def test_batch_of_eight(self):
        files = [{"filePath": f"f{i}.ts", "fileContent": ""} for i in range(8)]
        res = self.call("write_files", {"files": files})
        assert res.success
        assert all(f"f{i}.ts" in self.store for i in range(8))

    def test_configured_limit(self):
        registry = ToolRegistry()
        register_codebase_tools(registry, max_write_files=2)
        files = [{"filePath": f"f{i}.ts", "fileContent": ""} for i in range(3)]
        res = registry.invoke("write_files", {"files": files}, self.ctx)
        assert res.error.type is ErrorType.VALIDATION
        assert "max 2 files" in registry.get("write_files").spec.description

    def test_empty_path_leaves_store_untouched(self):
        before = self.store.export()
        res = self.call("write_files", {"files": [
            {"filePath": "ok.ts", "fileContent": "x"},
            {"filePath": "", "fileContent": "y"},
        ]})
        assert res.error.type is ErrorType.VALIDATION
        assert self.store.export() == before

    def test_unparseable_payload(self):
        res = self.call("write_files", {"files": "please write my files"})
        assert res.error.type is ErrorType.VALIDATION
        assert "Expected format" in res.error.message

    def test_missing_files_argument(self):
        res = self.call("write_files", {})
        assert res.error.type is ErrorType.VALIDATION


class TestDeleteFiles(ToolHarness):

    def test_delete_is_idempotent(self):
        first = self.call("delete_files", {"filePaths": ["README.md"]})
        second = self.call("delete_files", {"filePaths": ["README.md"]})
        assert first.output == "Successfully deleted file: README.md"
        assert second.success
        assert second.output == "File not found (ignored): README.md"

    def test_mixed(self):
        res = self.call("delete_files", {"filePaths": ["src/App.tsx", "ghost.ts"]})
        assert res.output.splitlines() == [
            "Successfully deleted file: src/App.tsx",
            "File not found (ignored): ghost.ts",
        ]
        assert "src/App.tsx" not in self.store

    def test_stringified_paths(self):
        res = self.call("delete_files", {"filePaths": json.dumps(["README.md"])})
        assert res.output == "Successfully deleted file: README.md"

    def test_empty_path_rejected(self):
        res = self.call("delete_files", {"filePaths": [""]})
        assert res.error.type is ErrorType.VALIDATION


class TestPlanFiles(ToolHarness):

    def test_markdown_list_without_mutation(self):
        before = self.store.export()
        res = self.call("plan_files", {"files": [
            {"filePath": "src/App.tsx", "purpose": "Adding routing"},
            {"filePath": "src/pages/Home.tsx", "description": "Creating the home page"},
        ]})
        assert res.output == "\n".join([
            "### Files to be created or modified:",
            "- `src/App.tsx`: Adding routing",
            "- `src/pages/Home.tsx`: Creating the home page",
        ])
        assert self.store.export() == before

    def test_empty_plan(self):
        assert self.call("plan_files", {"files": []}).output == "No files planned."

    def test_stringified_plan(self):
        payload = json.dumps({"files": [{"filePath": "a.ts", "purpose": "Adding a"}]})
        res = self.call("plan_files", {"files": payload})
        assert res.output.endswith("- `a.ts`: Adding a")


class TestSearchReplace(ToolHarness):

    def test_sequential_replacements_in_one_file(self):
        self.store.set_one("a.ts", "let x = 1;\nlet y = x;\n")
        res = self.call("search_replace", {"replacements": [
            {"filePath": "a.ts", "oldString": "let x = 1", "newString": "let x = 2"},
            {"filePath": "a.ts", "oldString": "let x = 2", "newString": "const x = 2"},
        ]})
        assert res.output.splitlines() == [
            "✅ Successfully replaced 1 occurrence(s) in 'a.ts'.",
            "✅ Successfully replaced 1 occurrence(s) in 'a.ts'.",
        ]
        assert self.store.get_content("a.ts") == "const x = 2;\nlet y = x;\n"

    def test_replace_all(self):
        self.store.set_one("a.ts", "foo foo foo")
        res = self.call("search_replace", {"replacements": [
            {"filePath": "a.ts", "oldString": "foo", "newString": "bar", "replaceAll": True},
        ]})
        assert res.output == "✅ Successfully replaced 3 occurrence(s) in 'a.ts'."
        assert self.store.get_content("a.ts") == "bar bar bar"

    def test_first_occurrence_only(self):
        self.store.set_one("a.ts", "foo foo")
        self.call("search_replace", {"replacements": [{"filePath": "a.ts", "oldString": "foo", "newString": "bar"}]})
        assert self.store.get_content("a.ts") == "bar foo"

    def test_errors_are_per_item(self):
        res = self.call("search_replace", {"replacements": [
            {"filePath": "ghost.ts", "oldString": "a", "newString": "b"},
            {"filePath": "README.md", "oldString": "nothing like this", "newString": "b"},
            {"filePath": "README.md", "oldString": "Demo", "newString": "Sample"},
        ]})
        lines = res.output.splitlines()
        assert lines[0] == "❌ Error: File 'ghost.ts' not found in codebase."
        assert lines[1].startswith("❌ Error: The string to replace was not found in 'README.md'.")
        assert lines[2] == "✅ Successfully replaced 1 occurrence(s) in 'README.md'."
        assert self.store.get_content("README.md") == "# Sample"
        assert self.store.get("README.md").type == "md"


class TestEndToEnd:

    def test_seed_find_write_read(self):
        store = CodebaseStore.from_payload(json.dumps({"files": [{"path": "a.ts", "content": "x", "type": "ts"}]}))
        registry = ToolRegistry()
        register_codebase_tools(registry)
        ctx = ToolContext(store=store)

        found = registry.invoke("find_files_with_text", {"keyword": "x"}, ctx).output
        assert found["matchingFiles"] == ["a.ts"]
        assert found["count"] == 1

        written = registry.invoke("write_files", {"files": [{"filePath": "a.ts", "fileContent": "y"}]}, ctx)
        assert written.output == "Successfully updated file: a.ts"

        read = registry.invoke("get_files_content", {"filePaths": ["a.ts"]}, ctx)
        assert read.output == [{"path": "a.ts", "content": "y", "error": None}]
        assert store.get("a.ts").type == "ts"
