"""
LLM Runner
Local LLM wrapper built on llama.cpp.
"""

import threading
from typing import Optional
from pathlib import Path
from loguru import logger

from loanlens.config import settings

# llama-cpp-python is an optional extra; without it the runner reports unavailable
try:
    from llama_cpp import Llama
    LLAMA_AVAILABLE = True
except ImportError:
    LLAMA_AVAILABLE = False
    Llama = None


class LLMRunner:
    """
    llama.cpp wrapper

    Loads a GGUF model lazily and generates short texts. Used to write
    the per-lender justification shown to advisors and applicants.

    A llama.cpp context is not safe for concurrent use, so loading and
    every model call run one at a time under a single lock.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        n_ctx: Optional[int] = None,
        n_gpu_layers: Optional[int] = None,
    ):
        """
        Args:
            model_path: GGUF model file path
            n_ctx: context window size
            n_gpu_layers: layers offloaded to GPU (0 means CPU only)
        """
        self.model_path = model_path or settings.MODEL_PATH
        self.n_ctx = n_ctx or settings.MODEL_N_CTX
        self.n_gpu_layers = (
            settings.MODEL_N_GPU_LAYERS if n_gpu_layers is None else n_gpu_layers
        )
        self._model: Optional[Llama] = None
        self._lock = threading.RLock()
        self.logger = logger.bind(component="LLMRunner")

    @property
    def is_available(self) -> bool:
        """Whether the model can be used"""
        if not LLAMA_AVAILABLE:
            return False
        return Path(self.model_path).exists()

    def load(self) -> bool:
        """Load the model"""
        with self._lock:
            if self._model is not None:
                return True
            return self._load()

    def _load(self) -> bool:
        if not LLAMA_AVAILABLE:
            self.logger.warning("llama-cpp-python is not installed")
            return False

        if not Path(self.model_path).exists():
            self.logger.warning(f"Model file not found: {self.model_path}")
            return False

        try:
            self.logger.info(f"Loading model: {self.model_path}")
            self._model = Llama(
                model_path=self.model_path,
                n_ctx=self.n_ctx,
                n_gpu_layers=self.n_gpu_layers,
                verbose=False,
            )
            self.logger.info("Model loaded successfully")
            return True
        except Exception as e:
            self.logger.error(f"Model loading failed: {e}")
            return False

    def generate(
        self,
        prompt: str,
        max_tokens: int = 256,
        temperature: float = 0.3,
        stop: Optional[list[str]] = None,
    ) -> Optional[str]:
        """
        Generate text

        Args:
            prompt: input prompt
            max_tokens: maximum tokens to generate
            temperature: sampling temperature
            stop: stop sequences

        Returns:
            Generated text, or None when the model is unavailable or fails
        """
        with self._lock:
            if not self.load():
                return None

            try:
                output = self._model(
                    prompt,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    stop=stop or ["</s>", "\n\n"],
                )
                return output["choices"][0]["text"].strip()
            except Exception as e:
                self.logger.error(f"Generation failed: {e}")
                return None


# singleton instance
_runner: Optional[LLMRunner] = None


def get_llm_runner() -> LLMRunner:
    """Return the LLM runner singleton"""
    global _runner
    if _runner is None:
        _runner = LLMRunner()
    return _runner
