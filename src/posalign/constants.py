#!/usr/bin/env python3
"""Constants and configuration values for posalign.

This module defines constants used throughout the posalign package including:
- Order-key spacing for the maintained linearization
- Gap and comment characters for padded alignment formats
- Defaults for score ingestion and ROC reporting
"""

import re

# Order keys are integers spaced KEY_SPACING apart after a dense rebuild.
# Inserting between two neighbours takes the midpoint, so roughly
# log2(KEY_SPACING) consecutive splits fit before a rebuild is required.
KEY_SPACING = 1 << 20

# Two neighbouring keys closer than this leave no room for a new key.
MIN_KEY_GAP = 2

# Padded alignment characters
GAP_CHAR = "-"
GAP_CHARS = frozenset({"-", "."})
COMMENT_PREFIX = ";"
ROW_SEPARATOR = "|"

# Allowed characters in a padded FASTA alignment row
ALIGNED_ROW_PATTERN = re.compile(r"[A-Za-z.*-]*")

# Text form of an edge: ((index1, id1), (index2, id2)). Names may hold commas
# and parentheses; a first name containing "), (<digits>, " is ambiguous.
EDGE_PATTERN = re.compile(r"\(\((\d+), (.+?)\), \((\d+), (.+)\)\)")

# Columns of the edge-score CSV format
SCORE_CSV_FIELDS = ("seq1", "pos1", "seq2", "pos2", "score")

# Default number of points on an ROC curve
DEFAULT_ROC_POINTS = 10
