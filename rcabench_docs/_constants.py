"""Common literal values used across rcabench_docs.

These constants keep filenames and content conventions centralized so
templates, generators, and tests can import the same values without drifting.
Intended for internal use within the rcabench_docs package.

Examples
--------
>>> from rcabench_docs import _constants
>>> _constants.BUILD_META_FILENAME
'.rcabench-docs-meta.json'
>>> _constants.SECTION_INDEX in _constants.INDEX_FILENAMES
True
"""

BUILD_META_FILENAME = ".rcabench-docs-meta.json"
SECTION_INDEX = "_index.md"
BUNDLE_INDEX = "index.md"
INDEX_FILENAMES = (SECTION_INDEX, BUNDLE_INDEX)
PAGE_OUTPUT_NAME = "index.html"
DEFAULT_SUMMARY_LENGTH = 70
