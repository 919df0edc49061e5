#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Prepare photos for printing and other bulk image operations.
"""

# local repo modules
import print_prep.cli


if __name__ == "__main__":
	print_prep.cli.main()
