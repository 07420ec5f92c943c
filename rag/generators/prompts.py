"""
Prompt templates for query expansion and answer generation.

Expansion prompts ask for a raw JSON array of strings only; the expander
still tolerates fenced or malformed output.
"""

JSON_ARRAY_INSTRUCTION = (
    "Respond ONLY with a raw JSON array of strings, no explanation, "
    "no code block, no backticks."
)


MULTI_QUERY_PROMPT = """You are a helpful assistant that generates multiple sub-queries related to an input question.
The goal is to break down the input into a set of sub-problems / sub-questions that can be answered in isolation.

Generate {n} search queries related to: "{question}"

{instruction}
Example: ["query1", "query2", "query3"]"""


PARALLEL_QUERY_PROMPT = """You are a helpful assistant that rewrites a question for a search engine.
Generate {n} different reformulations of the same question, each phrased differently
but asking for the same information.

Question: "{question}"

{instruction}
Example: ["reformulation1", "reformulation2", "reformulation3"]"""


HYPOTHETICAL_DOCUMENT_PROMPT = """You are an intelligent assistant who writes a paragraph to answer a question.
Write one short, factual-sounding paragraph that would answer: "{question}"

{instruction}
Example: ["paragraph"]"""


STEP_BACK_PROMPT = """You are a helpful assistant that, instead of answering, first reframes the question
into more general or insightful versions (step-back questions), from least to most abstract.

Generate up to {n} general or insightful versions of: "{question}"

{instruction}
Example: ["general question 1", "general question 2"]"""


EXPANSION_PROMPTS = {
    "multi_query": MULTI_QUERY_PROMPT,
    "parallel_query": PARALLEL_QUERY_PROMPT,
    "hypothetical_document": HYPOTHETICAL_DOCUMENT_PROMPT,
    "step_back": STEP_BACK_PROMPT,
}


def build_expansion_prompt(strategy: str, question: str, n: int) -> str:
    """
    Build the expansion prompt for a strategy.

    Args:
        strategy: Expansion strategy name
        question: Original question
        n: Number of queries to ask for

    Returns:
        Formatted prompt
    """
    template = EXPANSION_PROMPTS[strategy]
    return template.format(question=question, n=n, instruction=JSON_ARRAY_INSTRUCTION)


# System prompt - kept consistent across calls for provider-side prompt caching
SYSTEM_PROMPT = """You are an assistant for question-answering tasks.
Use the following pieces of retrieved context to answer the question.
If you don't know the answer, just say that you don't know.
Use three sentences maximum and keep the answer concise."""


NO_CONTEXT_MARKER = "(No relevant context was found.)"

CONTEXT_SEPARATOR = "\n"


def format_context(passages, separator: str = CONTEXT_SEPARATOR) -> str:
    """
    Join passage texts in rank order.

    Args:
        passages: Ordered passages
        separator: Separator between passage texts

    Returns:
        Context string, or the no-context marker when empty
    """
    if not passages:
        return NO_CONTEXT_MARKER
    return separator.join(p.text for p in passages)


def build_qa_prompt(question: str, passages) -> str:
    """
    Build user prompt for question answering.
    """
    context = format_context(passages)

    return f"""Question: {question}

Context: {context}

Answer:"""
