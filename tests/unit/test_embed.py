"""Tests for embed and embed_many."""

import asyncio

import pytest

from modelfusion.errors import ApiCallError
from modelfusion.model_function import (
    EmbeddingModel,
    FunctionOptions,
    ModelResponse,
    ModelSettings,
    embed,
    embed_many,
)
from modelfusion.run import FinishStatus
from modelfusion.run.events import CallUsage


class LengthEmbeddingModel(EmbeddingModel[ModelSettings]):
    """Embeds a text as [length, position in its group]."""

    def __init__(
        self,
        *,
        max_values_per_call: int | None = None,
        parallel: bool = False,
        fail_on: str | None = None,
    ) -> None:
        super().__init__(ModelSettings())
        self._max_values_per_call = max_values_per_call
        self._parallel = parallel
        self.fail_on = fail_on
        self.groups: list[list[str]] = []
        self.running = 0
        self.peak = 0

    @property
    def provider(self) -> str:
        return "test"

    @property
    def max_values_per_call(self) -> int | None:
        return self._max_values_per_call

    @property
    def is_parallelizable(self) -> bool:
        return self._parallel

    @property
    def dimensions(self) -> int:
        return 2

    async def do_embed_values(self, values, options):  # type: ignore[no-untyped-def]
        self.groups.append(list(values))
        self.running += 1
        self.peak = max(self.peak, self.running)
        # Later groups finish first
        await asyncio.sleep(0.01 / len(self.groups))
        self.running -= 1

        if self.fail_on is not None and self.fail_on in values:
            raise ApiCallError("Embedding failed", url="https://api.test", status_code=400)

        return ModelResponse(
            value=[[float(len(value)), float(i)] for i, value in enumerate(values)],
            raw_response={"count": len(values)},
            usage=CallUsage({"tokens": sum(len(v) for v in values)}),
        )


class TestEmbed:
    """Tests for embed."""

    @pytest.mark.asyncio
    async def test_single_value(self) -> None:
        """Test embedding one value."""
        model = LengthEmbeddingModel()
        assert await embed(model, "hello") == [5.0, 0.0]
        assert model.groups == [["hello"]]

    @pytest.mark.asyncio
    async def test_full_response(self, collector) -> None:
        """Test raw response, metadata and events."""
        response = await embed(
            LengthEmbeddingModel(),
            "hello",
            options=FunctionOptions(observers=[collector]),
            full_response=True,
        )

        assert response.value == [5.0, 0.0]
        assert response.raw_response == {"count": 1}
        assert response.metadata.function_type == "embed"
        assert collector.events[0].metadata.input == "hello"
        assert collector.finished[0].status == FinishStatus.SUCCESS


class TestEmbedMany:
    """Tests for embed_many."""

    @pytest.mark.asyncio
    async def test_single_group(self) -> None:
        """Test that unbounded models get one call."""
        model = LengthEmbeddingModel()
        embeddings = await embed_many(model, ["a", "bb", "ccc"])
        assert embeddings == [[1.0, 0.0], [2.0, 1.0], [3.0, 2.0]]
        assert model.groups == [["a", "bb", "ccc"]]

    @pytest.mark.asyncio
    async def test_grouping_sequential(self) -> None:
        """Test splitting into groups of max_values_per_call."""
        model = LengthEmbeddingModel(max_values_per_call=2)
        embeddings = await embed_many(model, ["a", "bb", "ccc", "dddd", "eeeee"])

        assert model.groups == [["a", "bb"], ["ccc", "dddd"], ["eeeee"]]
        assert [e[0] for e in embeddings] == [1.0, 2.0, 3.0, 4.0, 5.0]
        assert model.peak == 1

    @pytest.mark.asyncio
    async def test_grouping_parallel_keeps_order(self) -> None:
        """Test that parallel groups keep the input order."""
        model = LengthEmbeddingModel(max_values_per_call=1, parallel=True)
        embeddings = await embed_many(model, ["a", "bb", "ccc"])

        assert [e[0] for e in embeddings] == [1.0, 2.0, 3.0]
        assert model.peak == 3

    @pytest.mark.asyncio
    async def test_full_response(self) -> None:
        """Test raw responses per group and merged usage."""
        model = LengthEmbeddingModel(max_values_per_call=2)
        embeddings, raw_response, metadata = await embed_many(
            model, ["a", "bb", "ccc"], full_response=True
        )

        assert len(embeddings) == 3
        assert raw_response == [{"count": 2}, {"count": 1}]
        assert metadata.usage["tokens"] == 6

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_values_per_call", [None, 2])
    async def test_empty(self, max_values_per_call: int | None, collector) -> None:
        """Test that embedding no values never calls the provider."""
        model = LengthEmbeddingModel(max_values_per_call=max_values_per_call)

        embeddings = await embed_many(model, [], options=FunctionOptions(observers=[collector]))

        assert embeddings == []
        assert model.groups == []
        assert collector.finished[0].status == FinishStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_group_failure(self, collector) -> None:
        """Test that a failing group fails the call."""
        model = LengthEmbeddingModel(max_values_per_call=1)

        with pytest.raises(ApiCallError):
            await embed_many(
                model, ["a", "boom", "c"], options=FunctionOptions(observers=[collector])
            )

        assert model.groups == [["a"], ["boom"]]
        assert collector.finished[0].status == FinishStatus.ERROR
