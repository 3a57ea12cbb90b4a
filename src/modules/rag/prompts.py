"""Prompts for question answering over uploaded documents.

The model is instructed to answer from the retrieved context only and to
say so when the context does not contain the answer.
"""

from src.modules.rag.schemas import RetrievedChunk

RAG_PROMPT = """You are a helpful assistant that answers questions about the user's documents.
Answer the request at the end using ONLY the information in the "Context" section.
If the context does not contain the answer, do not make one up. Say: "I could not find the answer in the provided documents."

Request: {question}

Context:
{context}

Answer:
"""

# Returned instead of calling the model when nothing was retrieved
NO_DOCUMENTS_ANSWER = (
    "No relevant documents were found. Please upload a document first."
)

CONTEXT_SEPARATOR = "\n\n"


def build_context(chunks: list[RetrievedChunk]) -> str:
    """Join chunk texts in rank order, separated by one blank line."""
    return CONTEXT_SEPARATOR.join(c.content for c in sorted(chunks, key=lambda c: c.rank))


def build_rag_prompt(question: str, context: str) -> str:
    """Fill the prompt template with the question and retrieved context."""
    return RAG_PROMPT.format(question=question, context=context)
