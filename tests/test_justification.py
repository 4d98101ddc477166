"""
LoanLens tests - Justification generators
"""

import asyncio
import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest
import sys
sys.path.insert(0, ".")

from loanlens.errors import JustificationGenerationFailed
from loanlens.llm.justification import (
    HttpJustificationGenerator,
    LLMJustificationGenerator,
    get_justification_generator,
    template_justification,
)
from loanlens.llm.prompts import SAFETY_RULES, build_justification_prompt
from loanlens.llm.runner import LLMRunner
from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.results import PillarScore, ScoreBreakdown


def make_breakdown(composite: float) -> ScoreBreakdown:
    return ScoreBreakdown(
        future=80,
        financial=70,
        past=95,
        base_composite=composite,
        composite=composite,
        details=[
            PillarScore(pillar="future", score=80, reason="tier S approval 90%"),
            PillarScore(pillar="financial", score=70, reason="uses 60% of lender maximum"),
            PillarScore(pillar="past", score=95, reason="processes in ~7 days"),
        ],
    )


class FakeRunner:
    def __init__(self, text):
        self.text = text
        self.prompts = []

    def generate(self, prompt, max_tokens=256, temperature=0.3, stop=None):
        self.prompts.append(prompt)
        return self.text


class TestTemplateJustification:

    def setup_method(self):
        self.lender = LenderProfile(id="l1", name="HDFC Credila")

    def test_bands(self):
        assert "excellent" in template_justification(self.lender, make_breakdown(88), False)
        assert "good fit" in template_justification(self.lender, make_breakdown(72), False)
        assert "needs review" in template_justification(self.lender, make_breakdown(55), False)

    def test_strongest_pillar_named(self):
        text = template_justification(self.lender, make_breakdown(88), False)
        assert "past" in text

    def test_locked(self):
        text = template_justification(self.lender, make_breakdown(40), True)
        assert "locked" in text
        assert self.lender.name in text


class TestPrompt:

    def test_prompt_contents(self):
        lender = LenderProfile(id="l1", name="Avanse")
        prompt = build_justification_prompt(lender, make_breakdown(81.2), locked=True)

        assert "Avanse" in prompt
        assert "LOCKED" in prompt
        assert "81.2" in prompt
        for rule in SAFETY_RULES:
            assert rule in prompt


class TestLLMJustificationGenerator:

    def setup_method(self):
        self.lender = LenderProfile(id="l1", name="Avanse")

    def test_text_returned(self):
        runner = FakeRunner("Avanse is a strong fit.")
        generator = LLMJustificationGenerator(runner=runner)

        text = asyncio.run(generator.generate(self.lender, make_breakdown(80), False))

        assert text == "Avanse is a strong fit."
        assert "Avanse" in runner.prompts[0]

    def test_unavailable_model_raises(self):
        generator = LLMJustificationGenerator(runner=FakeRunner(None))

        with pytest.raises(JustificationGenerationFailed):
            asyncio.run(generator.generate(self.lender, make_breakdown(80), False))


class CountingModel:
    """Stands in for a loaded llama.cpp model and records overlapping calls"""

    def __init__(self):
        self.active = 0
        self.peak = 0
        self.calls = 0
        self._guard = threading.Lock()

    def __call__(self, prompt, max_tokens, temperature, stop):
        with self._guard:
            self.active += 1
            self.calls += 1
            self.peak = max(self.peak, self.active)
        time.sleep(0.01)
        with self._guard:
            self.active -= 1
        return {"choices": [{"text": "  Solid option.  "}]}


class TestLLMRunner:
    """Model calls through one runner never overlap"""

    def setup_method(self):
        self.model = CountingModel()
        self.runner = LLMRunner(model_path="missing.gguf")
        self.runner._model = self.model

    def test_loaded_model_is_reused(self):
        assert self.runner.load()
        assert self.runner.generate("prompt") == "Solid option."

    def test_threads_are_serialized(self):
        with ThreadPoolExecutor(max_workers=8) as pool:
            texts = list(pool.map(self.runner.generate, [f"prompt {i}" for i in range(16)]))

        assert texts == ["Solid option."] * 16
        assert self.model.calls == 16
        assert self.model.peak == 1

    def test_concurrent_justifications_are_serialized(self):
        generator = LLMJustificationGenerator(runner=self.runner)
        lenders = [LenderProfile(id=f"l{i}", name=f"Lender {i}") for i in range(6)]

        async def generate_all():
            return await asyncio.gather(*[
                generator.generate(lender, make_breakdown(75), False) for lender in lenders
            ])

        texts = asyncio.run(generate_all())

        assert texts == ["Solid option."] * 6
        assert self.model.peak == 1


class TestHttpJustificationGenerator:

    def setup_method(self):
        self.lender = LenderProfile(id="l1", name="Avanse")
        self.url = "https://textgen.test/v1/justify"

    def _generate(self, handler):
        async def call():
            transport = httpx.MockTransport(handler)
            async with httpx.AsyncClient(transport=transport) as client:
                generator = HttpJustificationGenerator(url=self.url, client=client)
                return await generator.generate(self.lender, make_breakdown(80), False)

        return asyncio.run(call())

    def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"text": "  Avanse suits this profile.  "})

        assert self._generate(handler) == "Avanse suits this profile."
        assert seen["body"]["lender_id"] == "l1"
        assert seen["body"]["locked"] is False
        assert "prompt" in seen["body"]

    def test_server_error_raises(self):
        def handler(request):
            return httpx.Response(500, json={"error": "boom"})

        with pytest.raises(JustificationGenerationFailed):
            self._generate(handler)

    def test_empty_text_raises(self):
        def handler(request):
            return httpx.Response(200, json={"text": ""})

        with pytest.raises(JustificationGenerationFailed):
            self._generate(handler)

    def test_non_json_raises(self):
        def handler(request):
            return httpx.Response(200, text="not json")

        with pytest.raises(JustificationGenerationFailed):
            self._generate(handler)

    def test_no_endpoint_raises(self):
        generator = HttpJustificationGenerator(url="")
        generator.url = ""

        with pytest.raises(JustificationGenerationFailed):
            asyncio.run(generator.generate(self.lender, make_breakdown(80), False))


class TestGeneratorFactory:

    def test_backends(self):
        assert get_justification_generator("none") is None
        assert isinstance(get_justification_generator("http"), HttpJustificationGenerator)
        assert isinstance(
            get_justification_generator("LLM"), LLMJustificationGenerator
        )

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            get_justification_generator("carrier-pigeon")
