"""
practice-engine: mastery tracking, spaced review and interleaved practice
for math topics.
"""

__version__ = "1.0.0"
