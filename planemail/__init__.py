"""
planemail - find flight confirmations in Gmail and export them.
"""

VERSION = "1.0.0"
