# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "gitcas"
__summary__ = "A git-style content-addressable object store."
__url__ = "https://github.com/gitcas/gitcas"

__version__ = "0.1.0"

__install_requires__ = ["fs>=2.4.16", "setuptools<81"]
__tests_require__ = ["pytest", "tox"]

__author__ = "gitcas contributors"
__email__ = "gitcas@users.noreply.github.com"

__license__ = "MIT License"
