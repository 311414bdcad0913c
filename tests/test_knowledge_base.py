"""
Tests for the knowledge base query surface and assistant grounding.
"""

import json

import pytest

from seedi.assistant import (
    aiter_stream_chunks,
    build_assistant_prompt,
    describe_context,
    iter_stream_chunks,
)
from seedi.catalog.knowledge_base import (
    KnowledgeBaseFilters,
    dedupe_records,
    get_by_id,
    get_taxonomy,
    load_data_sources,
    load_knowledge_base,
    load_taxonomy,
    query,
    stats,
)
from seedi.core.exceptions import AssistantStreamError, LoadError, ValidationError
from seedi.core.schemas import UserContext


@pytest.fixture
def raw_records():
    return [
        {
            "id": "kb-1",
            "title": "Solar Cold Room",
            "short_description": "Walk-in cold storage powered by solar panels.",
            "long_description": "",
            "type": "Technology",
            "use_cases": "Post-harvest, Storage",
            "readiness_level": "Proven",
            "adoption_level": "Common",
            "region": "Sub-Saharan Africa",
            "countries_adoption": "Kenya, Nigeria",
            "country_origin": "India",
            "impact_sdgs": "2, 7, 12",
        },
        {
            "id": "kb-2",
            "title": "Push-Pull Intercropping",
            "short_description": None,
            "long_description": "Desmodium repels stemborers while Napier grass traps them. " * 10,
            "type": "Practice",
            "use_cases": "Pest control",
            "readiness_level": "Proven",
            "adoption_level": "Emerging",
            "region": "Sub-Saharan Africa",
            "countries_adoption": "Kenya, Uganda",
            "country_origin": "Kenya",
            "impact_sdgs": "2, 15",
        },
        {
            "id": "kb-3",
            "title": "Alternate Wetting and Drying",
            "short_description": "Rice irrigation that saves water and cuts methane.",
            "type": "Practice",
            "use_cases": "Irrigation, Climate",
            "readiness_level": "Scaling",
            "adoption_level": "Common",
            "region": "South Asia",
            "countries_adoption": "Bangladesh",
            "country_origin": "Philippines",
            "impact_sdgs": "6, 13",
            "extra_field": "kept",
        },
    ]


@pytest.fixture
def records(raw_records):
    return dedupe_records(raw_records)


class TestLoading:
    """Tests for load_knowledge_base."""

    def test_merges_files_first_occurrence_wins(self, tmp_path, raw_records):
        first = tmp_path / "a.json"
        second = tmp_path / "b.json"
        first.write_text(json.dumps(raw_records[:2]))
        second.write_text(json.dumps([{**raw_records[0], "title": "Duplicate"}, raw_records[2]]))

        loaded = load_knowledge_base([first, second])

        assert [r.id for r in loaded] == ["kb-1", "kb-2", "kb-3"]
        assert loaded[0].title == "Solar Cold Room"

    def test_extra_fields_preserved(self, records):
        assert records[2].model_dump()["extra_field"] == "kept"

    def test_nulls_become_blank(self, records):
        assert records[1].short_description == ""

    def test_summary_falls_back_to_long_description(self, records):
        assert records[0].summary.startswith("Walk-in")
        assert len(records[1].summary) == 200

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(LoadError):
            load_knowledge_base([tmp_path / "missing.json"])

    def test_not_an_array(self, tmp_path):
        path = tmp_path / "obj.json"
        path.write_text('{"id": "x"}')
        with pytest.raises(LoadError):
            load_knowledge_base([path])

    def test_invalid_record(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('[{"title": "no id"}]')
        with pytest.raises(LoadError):
            load_knowledge_base([path])


class TestQuery:
    """Tests for query, get_by_id and stats."""

    def test_no_filters(self, records):
        page = query(records)
        assert len(page.data) == 3
        assert page.pagination.total == 3
        assert page.pagination.total_pages == 1

    @pytest.mark.parametrize("filters,expected", [
        (KnowledgeBaseFilters(search="COLD"), ["kb-1"]),
        (KnowledgeBaseFilters(search="stemborers"), ["kb-2"]),
        (KnowledgeBaseFilters(type="practice"), ["kb-2", "kb-3"]),
        (KnowledgeBaseFilters(use_case="irrigation"), ["kb-3"]),
        (KnowledgeBaseFilters(readiness_level="proven"), ["kb-1", "kb-2"]),
        (KnowledgeBaseFilters(adoption_level="common"), ["kb-1", "kb-3"]),
        (KnowledgeBaseFilters(region="asia"), ["kb-3"]),
        (KnowledgeBaseFilters(country="india"), ["kb-1"]),
        (KnowledgeBaseFilters(country="kenya"), ["kb-1", "kb-2"]),
        (KnowledgeBaseFilters(sdg="15"), ["kb-2"]),
        (KnowledgeBaseFilters(type="practice", region="africa"), ["kb-2"]),
        (KnowledgeBaseFilters(search=""), ["kb-1", "kb-2", "kb-3"]),
    ])
    def test_filters(self, records, filters, expected):
        assert [r.id for r in query(records, filters).data] == expected

    def test_pagination(self, records):
        page = query(records, page=2, limit=2)
        assert [r.id for r in page.data] == ["kb-3"]
        assert page.pagination.to_dict() == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}

    def test_page_past_end(self, records):
        page = query(records, page=5, limit=2)
        assert page.data == []
        assert page.pagination.total == 3

    def test_invalid_paging(self, records):
        with pytest.raises(ValueError):
            query(records, page=0)
        with pytest.raises(ValueError):
            query(records, limit=0)

    def test_page_to_dict(self, records):
        payload = query(records, limit=1).to_dict()
        assert payload["data"][0]["id"] == "kb-1"
        assert payload["pagination"]["totalPages"] == 3

    def test_get_by_id(self, records):
        assert get_by_id(records, "kb-2").title == "Push-Pull Intercropping"
        assert get_by_id(records, "nope") is None

    def test_stats(self, records):
        assert stats(records).to_dict() == {
            "totalInnovations": 3,
            "totalTypes": 2,
            "totalUseCases": 5,
            "totalCountries": 4,
            "totalRegions": 2,
            "totalSdgs": 6,
        }


class TestTaxonomyAndDataSources:
    """Tests for the taxonomy and data source exports."""

    @pytest.fixture
    def taxonomy_file(self, tmp_path):
        path = tmp_path / "taxonomy.json"
        path.write_text(json.dumps([
            {"counter": "12", "id": "t-1", "vocabulary": "use_cases", "name": "Irrigation",
             "value": "irrigation", "description": None, "depth": "0", "weight": "1"},
            {"counter": 4, "id": 2, "vocabulary": "regions", "name": "South Asia",
             "value": "south-asia", "description": "", "depth": "0", "weight": "0"},
            {"counter": "7", "id": "t-3", "vocabulary": "use_cases", "name": "Storage",
             "value": "storage", "description": "Post-harvest storage", "depth": "1",
             "weight": "2", "parent": "t-1"},
        ]))
        return path

    def test_load_taxonomy(self, taxonomy_file):
        terms = load_taxonomy(taxonomy_file)
        assert [t.id for t in terms] == ["t-1", "2", "t-3"]
        assert terms[0].description == ""
        assert terms[1].counter == "4"
        assert terms[2].model_dump()["parent"] == "t-1"

    def test_vocabulary_filter_is_exact(self, taxonomy_file):
        terms = load_taxonomy(taxonomy_file)
        assert [t.name for t in get_taxonomy(terms, "use_cases")] == ["Irrigation", "Storage"]
        assert get_taxonomy(terms, "Use_Cases") == []
        assert get_taxonomy(terms, "use") == []

    def test_no_vocabulary_returns_all(self, taxonomy_file):
        terms = load_taxonomy(taxonomy_file)
        assert get_taxonomy(terms) == terms
        assert get_taxonomy(terms, "") == terms

    def test_load_data_sources(self, tmp_path):
        path = tmp_path / "sources.json"
        path.write_text(json.dumps([
            {"nid": 101, "title": "CGIAR", "body": "Research partnership",
             "field_use_cases_description": None},
            {"nid": "102", "title": "FAO TECA", "body": "", "field_use_cases_description": "Mixed"},
        ]))
        sources = load_data_sources(path)
        assert [s.nid for s in sources] == ["101", "102"]
        assert sources[0].field_use_cases_description == ""

    @pytest.mark.parametrize("loader", [load_taxonomy, load_data_sources])
    def test_malformed_exports(self, tmp_path, loader):
        missing = tmp_path / "missing.json"
        with pytest.raises(LoadError):
            loader(missing)
        not_array = tmp_path / "obj.json"
        not_array.write_text("{}")
        with pytest.raises(LoadError):
            loader(not_array)
        no_id = tmp_path / "no_id.json"
        no_id.write_text('[{"title": "anonymous"}]')
        with pytest.raises(LoadError):
            loader(no_id)


class TestAssistantPrompt:
    """Tests for build_assistant_prompt."""

    def test_grounds_on_matching_records(self, records):
        prompt = build_assistant_prompt("cold", records)
        assert "containing 3 innovations across 4+ countries aligned with 6" in prompt
        assert "- Solar Cold Room (Technology): Walk-in cold storage" in prompt
        assert "Push-Pull" not in prompt
        assert prompt.rstrip().endswith("all agricultural topics.")

    def test_no_matches_omits_section(self, records):
        prompt = build_assistant_prompt("vertical farming", records)
        assert "Relevant innovations" not in prompt

    def test_caps_grounding_records(self, records):
        many = dedupe_records(
            [{"id": f"kb-{i}", "title": f"Drip kit {i}", "type": "Technology"} for i in range(6)]
        )
        prompt = build_assistant_prompt("drip", many)
        assert prompt.count("- Drip kit") == 3

    def test_includes_user_context(self, records):
        ctx = UserContext(role="Farmer", primary_objective="Reduce Losses", region="East Africa")
        prompt = build_assistant_prompt("storage", records, ctx)
        assert "User's current context: Role: Farmer; Objective: Reduce Losses; Region: East Africa" in prompt

    def test_blank_question_rejected(self, records):
        with pytest.raises(ValidationError):
            build_assistant_prompt("   ", records)

    def test_describe_context(self):
        assert describe_context(None) == ""
        assert describe_context("  smallholder in Kenya ") == "smallholder in Kenya"


class TestAssistantStream:
    """Tests for SSE chunk decoding."""

    def test_yields_content_until_done(self):
        lines = [
            'data: {"content": "Hello"}',
            "",
            ": keep-alive",
            'data: {"content": " world"}',
            'data: {"done": true}',
            'data: {"content": "ignored"}',
        ]
        assert list(iter_stream_chunks(lines)) == ["Hello", " world"]

    def test_error_frame_raises(self):
        lines = ['data: {"content": "Hi"}', 'data: {"error": "AI request failed"}']
        chunks = iter_stream_chunks(lines)
        assert next(chunks) == "Hi"
        with pytest.raises(AssistantStreamError, match="AI request failed"):
            next(chunks)

    def test_skips_undecodable_frames(self):
        lines = ["data: {broken", 'data: {"content": "ok"}']
        assert list(iter_stream_chunks(lines)) == ["ok"]

    def test_async_stream(self):
        import asyncio

        async def lines():
            for line in ['data: {"content": "a"}', 'data: {"content": "b"}', 'data: {"done": true}']:
                yield line

        async def collect():
            return [chunk async for chunk in aiter_stream_chunks(lines())]

        assert asyncio.run(collect()) == ["a", "b"]
