"""
flatmodel - an in-memory, file-backed row store for delimited text files.

Loads a CSV file fully into memory, answers filtered queries against it, and
writes changes back under an explicit writable / append-only / backup policy.
"""
