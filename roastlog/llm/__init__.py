"""Remote annotation client and prompt construction."""
