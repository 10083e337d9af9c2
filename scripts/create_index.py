import argparse
import json
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from semantic_search.api.dependencies import get_config_store, get_helper, get_index_template
from semantic_search.config import get_settings
from semantic_search.engine.client import SearchEngineClient


def main():
    parser = argparse.ArgumentParser(
        description="Create the search index with the semantic search rewrite rules applied."
    )
    parser.add_argument("settings", help="Path to the index settings JSON file")
    parser.add_argument("mapping", help="Path to the index mapping JSON file")
    parser.add_argument("--index", default=None, help="Index name (defaults to SEMANTIC_SEARCH_INDEX_NAME)")
    parser.add_argument("--dry-run", action="store_true", help="Print the rewritten documents and exit")
    args = parser.parse_args()

    with open(args.settings, encoding="utf-8") as f:
        settings_json = f.read()
    with open(args.mapping, encoding="utf-8") as f:
        mapping_json = f.read()

    print("Loading configuration...")
    get_config_store().load()
    get_helper()

    settings_json, mapping_json = get_index_template().materialize(settings_json, mapping_json)

    if args.dry_run:
        print(settings_json)
        print(mapping_json)
        return

    index = args.index or get_settings().index_name
    print(f"Creating index {index}...")
    result = SearchEngineClient().create_index(index, settings_json, mapping_json)
    print(json.dumps(result, indent=2))
    print("Done!")


if __name__ == "__main__":
    main()
