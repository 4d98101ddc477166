"""
Agent base class
Abstract base every pipeline stage inherits from.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic
from loguru import logger

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """
    Agent base class

    Every stage subclasses this.
    - input and output types are explicit
    - errors are logged and re-raised the same way everywhere
    """

    name: str = "BaseAgent"

    def __init__(self):
        self.logger = logger.bind(agent=self.name)

    def run(self, input_data: InputT) -> OutputT:
        """
        Run the agent.

        Args:
            input_data: input data

        Returns:
            output data
        """
        try:
            self._validate_input(input_data)
            result = self._process(input_data)
            self._validate_output(result)
            return result

        except Exception as e:
            self.logger.error(f"{self.name} error: {e}")
            raise

    async def arun(self, input_data: InputT) -> OutputT:
        """Async variant of run(); stages without I/O just call _process."""
        try:
            self._validate_input(input_data)
            result = await self._aprocess(input_data)
            self._validate_output(result)
            return result

        except Exception as e:
            self.logger.error(f"{self.name} error: {e}")
            raise

    @abstractmethod
    def _process(self, input_data: InputT) -> OutputT:
        """
        Processing logic (implemented by subclasses)
        """
        pass

    async def _aprocess(self, input_data: InputT) -> OutputT:
        return self._process(input_data)

    def _validate_input(self, input_data: InputT) -> None:
        """Input check (override when needed)"""
        if input_data is None:
            raise ValueError(f"{self.name}: input data is None")

    def _validate_output(self, output_data: OutputT) -> None:
        """Output check (override when needed)"""
        if output_data is None:
            raise ValueError(f"{self.name}: output data is None")
