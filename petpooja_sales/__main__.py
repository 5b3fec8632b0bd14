"""
Allows running the ingestion with ``python -m petpooja_sales``.
"""

import sys

from petpooja_sales.pipeline import main

sys.exit(main())
