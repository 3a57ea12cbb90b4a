"""RAG service orchestrating retrieval and generation."""

import asyncio

import structlog

from src.infrastructure.llm import LLMProvider
from src.infrastructure.observability import traced
from src.modules.rag.classifier import classify_error
from src.modules.rag.exceptions import ClassifiedError, ErrorKind
from src.modules.rag.index import DocumentIndex
from src.modules.rag.prompts import NO_DOCUMENTS_ANSWER, build_context, build_rag_prompt
from src.modules.rag.schemas import AskResult, RetrievedChunk

logger = structlog.get_logger()

# Shown when something outside the error taxonomy escapes generate_answer
GENERIC_ERROR_ANSWER = "Sorry, something went wrong. Please try again."


class RAGService:
    """Answers questions from the content of uploaded documents.

    A question is answered in three sequential steps: retrieve the most
    similar chunks, join them into a context, and ask the model to answer
    from that context only. Every failure leaves this class as a
    ClassifiedError so callers can show a fixed message per error kind.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        document_index: DocumentIndex,
        *,
        top_k: int = 3,
        generation_timeout_seconds: float = 60.0,
    ) -> None:
        """Initialize the RAG service.

        Args:
            llm_provider: Provider for generating answers.
            document_index: Index searched for relevant chunks.
            top_k: Number of chunks to retrieve per question.
            generation_timeout_seconds: Deadline for a single generation call.
        """
        self._llm = llm_provider
        self._index = document_index
        self._top_k = top_k
        self._generation_timeout = generation_timeout_seconds

    @traced("rag.generate_answer")
    async def generate_answer(self, question: str) -> str:
        """Answer a question using the indexed documents.

        Args:
            question: The user's question.

        Returns:
            The model's answer verbatim, or NO_DOCUMENTS_ANSWER when nothing
            relevant is indexed.

        Raises:
            ClassifiedError: For every failure. Retrieval failures are
                RATE_LIMIT_EXCEEDED or NO_DOCUMENTS_FOUND, generation
                failures are classified by classify_error(), anything else
                is UNKNOWN.
        """
        logger.info("rag_question_received", question_length=len(question))

        try:
            chunks = await self._retrieve(question)

            context = build_context(chunks)
            if not context:
                logger.info("rag_no_documents", question_length=len(question))
                return NO_DOCUMENTS_ANSWER

            return await self._generate(question, context, chunks)

        except ClassifiedError as e:
            logger.error(
                "rag_error",
                error_kind=e.kind.value,
                error=e.technical_message,
            )
            raise

        except Exception as e:
            logger.exception(
                "rag_unexpected_error",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ClassifiedError(ErrorKind.UNKNOWN, f"Unexpected error: {e}") from e

    async def ask(self, question: str) -> AskResult:
        """Answer a question, turning failures into a user-facing message.

        Never raises for a failed answer; is_error is set instead.
        """
        try:
            answer = await self.generate_answer(question)
        except ClassifiedError as e:
            return AskResult(question=question, answer=e.user_message, is_error=True)
        except Exception as e:
            logger.exception("rag_ask_failed", error=str(e), error_type=type(e).__name__)
            return AskResult(question=question, answer=GENERIC_ERROR_ANSWER, is_error=True)

        return AskResult(question=question, answer=answer)

    async def _retrieve(self, question: str) -> list[RetrievedChunk]:
        logger.debug("rag_retrieving", top_k=self._top_k)
        try:
            return await self._index.similarity_search(question, top_k=self._top_k)
        except Exception as e:
            classified = classify_error(e)
            if classified.kind is ErrorKind.RATE_LIMIT_EXCEEDED:
                raise ClassifiedError(
                    ErrorKind.RATE_LIMIT_EXCEEDED,
                    f"Rate limit exceeded during retrieval: {e}",
                ) from e
            raise ClassifiedError(
                ErrorKind.NO_DOCUMENTS_FOUND,
                f"Document retrieval failed: {e}",
            ) from e

    async def _generate(
        self,
        question: str,
        context: str,
        chunks: list[RetrievedChunk],
    ) -> str:
        prompt = build_rag_prompt(question, context)

        logger.debug(
            "rag_generating",
            context_chunks=len(chunks),
            context_length=len(context),
            question_length=len(question),
        )

        try:
            async with asyncio.timeout(self._generation_timeout):
                answer = await self._llm.complete(prompt)
        except TimeoutError as e:
            raise ClassifiedError(
                ErrorKind.TIMEOUT,
                f"Generation did not finish within {self._generation_timeout}s",
            ) from e
        except ClassifiedError:
            raise
        except Exception as e:
            raise classify_error(e) from e

        logger.info(
            "rag_answer_generated",
            question_length=len(question),
            answer_length=len(answer),
            chunks_used=len(chunks),
            sources_used=sorted({c.filename for c in chunks}),
            top_score=max(c.score for c in chunks),
        )
        return answer
