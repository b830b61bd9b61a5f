"""
The row store engine: header resolution, casting, querying, guarded mutation
and persistence of delimited text files.
"""
