"""Built-in document shown when no text is supplied or restored."""

DEFAULT_DOCUMENT = """# Markdown Streaming Demo

This demo shows how **Markdown** is streamed token by token from LLMs.

## Features

- Real-time tokenization using `tiktoken`
- Progressive rendering of the revealed prefix
- Keyboard navigation (← →)
- URL sharing with compression

### Code Example

```python
tokens = encoding.encode(markdown)
print("Token count:", len(tokens))
```

> Use the controls below or arrow keys to navigate through tokens!

1. **Step 1**: Paste your markdown
2. **Step 2**: Watch it stream
3. **Step 3**: Share the URL

---

*Happy streaming!* 🚀"""
