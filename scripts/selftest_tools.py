from __future__ import annotations
import json

from pycodebase.session import CodebaseSession

SEED = {
    "files": [
        {"path": "README.md", "content": "# demo\n", "type": "md"},
        {"path": "src/app.ts", "content": "export const x = 1;\n", "type": "ts"},
    ]
}

def main():
    s = CodebaseSession.open(json.dumps(SEED))

    print("LIST:", s.call("list_files", {}).to_text())
    print("FIND:", s.call("find_files_with_text", {"keyword": "export"}).to_text())

    # plan, then write with a doubly-stringified payload
    print(s.call("plan_files", {"files": [{"filePath": "src/b.ts", "purpose": "Adding b"}]}).to_text())
    files = json.dumps(json.dumps({"files": [{"filePath": "src/b.ts", "fileContent": "export const b = 2;\n"}]}))
    print("WRITE:", s.call("write_files", {"files": files}).to_text())

    print("READ:", s.call("get_files_content", {"filePaths": ["src/b.ts", "missing.ts"]}).to_text())
    print(s.call("search_replace", {"replacements": [
        {"filePath": "src/app.ts", "oldString": "x = 1", "newString": "x = 42"},
    ]}).to_text())

    print("DELETE:", s.call("delete_files", {"filePaths": ["src/b.ts", "src/b.ts"]}).to_text())
    print("EXPORT:", s.store.to_json(indent=2))

if __name__ == "__main__":
    main()
