"""zsh-ai-suggestions - AI command suggestions for zsh.

A daemon bridging the zsh plugin and a text-completion backend through a
shared directory:
- The shell hook writes the partial command line to zsh-ai-input-<token>
- The daemon answers with zsh-ai-output-<token>
- Backends: OpenAI, Ollama, Gemini, or any model configured for `llm`
- Optional HTTP and stdin/stdout front-ends over the same backends
"""

__version__ = "1.0.0"
