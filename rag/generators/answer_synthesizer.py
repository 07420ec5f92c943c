"""
Answer synthesis from a question and fused context.
"""
import logging
from typing import Optional, Sequence

from knowledge.models import Passage
from rag.contracts import TextGenerator
from rag.errors import GenerationError
from rag.generators import prompts


logger = logging.getLogger(__name__)


class AnswerSynthesizer:
    """
    Renders the question/context prompt and calls the generator once.

    Passage texts are joined in fused-rank order. An empty context is
    rendered as "no relevant context found" so the model can say it does
    not know instead of the pass crashing.
    """

    def __init__(
        self,
        generator: TextGenerator,
        system_prompt: str = prompts.SYSTEM_PROMPT,
        temperature: float = 0.0,
        max_tokens: int = 1024
    ):
        """
        Initialize answer synthesizer.

        Args:
            generator: Text generation capability
            system_prompt: System prompt for answer generation
            temperature: Sampling temperature
            max_tokens: Maximum output tokens
        """
        self.generator = generator
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens

    def synthesize(
        self,
        question: str,
        context: Sequence[Passage],
        variant_tag: Optional[str] = None
    ) -> str:
        """
        Generate the answer.

        Args:
            question: Question to answer
            context: Ordered context passages
            variant_tag: Tag of the variant being answered (for error reports)

        Returns:
            Answer text

        Raises:
            GenerationError: If the generation call fails or returns nothing
        """
        if not context:
            logger.info(f"No evidence found for variant {variant_tag or 'original'}; answering without context")

        user_prompt = prompts.build_qa_prompt(question, context)
        try:
            answer = self.generator.generate(
                user_prompt,
                system_prompt=self.system_prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens
            )
        except Exception as e:
            raise GenerationError(
                f"Answer generation failed for variant '{variant_tag or 'original'}': {e}",
                question=question,
                variant_tag=variant_tag
            ) from e

        if not answer or not answer.strip():
            raise GenerationError(
                f"Answer generation returned an empty answer for variant '{variant_tag or 'original'}'",
                question=question,
                variant_tag=variant_tag
            )

        return answer.strip()
