"""Prompt templates for multi-stock comparison."""

from collections.abc import Iterable, Mapping
from typing import Any

from stock_signals.utils.normalize import canonical_dumps
from stock_signals.utils.validators import MAX_COMPARE_TICKERS, MIN_COMPARE_TICKERS

COMPARE_SYSTEM_PROMPT = """You are a friendly but professional financial analyst.

You are given the following information about multiple stock (all in JSON format):
- Technical analysis
- Fundamental analysis
- Sentiment analysis
- Valuation analysis

Analyze the information and provide a detailed summary of each stock. Compare the stocks and provide a detailed summary of the differences.

Respond in Markdown format. Include the ticker and the name of the company (if you know it) in the summary.
"""

# Bundle key -> section heading
ANALYSIS_SECTIONS = (
    ("technicals", "Technical analysis"),
    ("fundamentals", "Fundamental analysis"),
    ("sentiment", "Sentiment analysis"),
    ("valuation", "Valuation analysis"),
)

# Prompt definitions
PROMPTS = {
    "compare_stocks": {
        "description": (
            f"Compare {MIN_COMPARE_TICKERS}-{MAX_COMPARE_TICKERS} stocks across "
            "technical, fundamental, sentiment and valuation signals"
        ),
        "arguments": [{"name": "tickers", "required": True}],
    },
}


def build_ticker_section(bundle: Mapping[str, Any]) -> str:
    """Render one ticker bundle as a Markdown block with JSON per analysis."""
    lines = [f"# {bundle['ticker']}"]
    for key, heading in ANALYSIS_SECTIONS:
        lines.append(f"## {heading}")
        lines.append(canonical_dumps(bundle.get(key)))
        lines.append("")
    return "\n".join(lines).rstrip("\n")


def build_comparison_prompt(bundles: Iterable[Mapping[str, Any]]) -> str:
    """Concatenate every ticker section, separated by blank lines."""
    return "\n\n".join(build_ticker_section(bundle) for bundle in bundles)


def build_comparison_messages(bundles: Iterable[Mapping[str, Any]]) -> list[dict[str, str]]:
    """System plus user message pair for a chat-completion request."""
    return [
        {"role": "system", "content": COMPARE_SYSTEM_PROMPT},
        {"role": "user", "content": build_comparison_prompt(bundles)},
    ]


def render_messages(messages: Iterable[Mapping[str, str]]) -> str:
    """Flatten chat messages into one prompt text for clients without roles."""
    return "\n\n".join(message["content"].strip() for message in messages)


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    The comparison prompt asks the client to call the compare tool first,
    then summarize its bundles.

    Returns dict with 'messages' key, None for an unknown prompt.
    """
    if name not in PROMPTS:
        return None

    tickers = arguments.get("tickers", "")
    return {
        "messages": [
            {"role": "system", "content": COMPARE_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"""Compare {tickers}.

Call compare("{tickers}") and use the returned bundles. Each bundle holds the
technical, fundamental, sentiment and valuation analysis of one ticker.
Treat any analysis listed under "failures" as unavailable.""",
            },
        ]
    }
