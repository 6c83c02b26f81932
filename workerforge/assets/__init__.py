"""
Page assets: discovery, sanitization, and script compaction.

Each page lives in its own directory under the asset root with an
index.html template, a style.css and a script.js. The sanitizer folds the
three into one de-identified HTML document that the bundler embeds as a
compile-time constant.
"""

from workerforge.assets.models import AssetPageSet, PageRegistry, ProcessedPage
from workerforge.assets.randomizer import random_identifier

__all__ = ["AssetPageSet", "PageRegistry", "ProcessedPage", "random_identifier"]
