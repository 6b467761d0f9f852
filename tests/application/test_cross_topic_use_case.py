import threading

import pytest

from topic_rag.application.dto.query_dto import CrossTopicQueryRequest
from topic_rag.application.index_cache import IndexCache
from topic_rag.application.use_cases.query_cross_topic import QueryCrossTopic
from topic_rag.domain.errors import GenerationError, NoTopicsSucceededError, ValidationError


def _use_case(catalog, store, embedding, llm, **kw):
    return QueryCrossTopic(catalog, IndexCache(catalog, store, store, dim=4), embedding, llm, **kw)


def _seed(store):
    store.seed(
        "pentesting_docs",
        [{"text": f"pentest {i}", "filename": "p.pdf", "topic": "pentesting"} for i in range(5)],
    )
    store.seed("cloud_docs", [{"text": "iam roles", "filename": "iam.md", "topic": "cloud"}])


def test_unknown_topic_is_skipped_not_fatal(catalog, store, embedding, llm):
    _seed(store)
    res = _use_case(catalog, store, embedding, llm).execute(
        CrossTopicQueryRequest(topics=["pentesting", "quantum", "cloud"], question="Harden IAM?")
    )

    assert res.ok, res.error
    out = res.value.to_dict()
    assert out["topics"] == ["pentesting", "cloud"]
    assert out["skippedTopics"] == ["quantum"]
    # three per topic at most
    assert out["sourceCount"] == 4
    assert out["answer"] == "Generated answer."
    assert embedding.queries == ["Harden IAM?"]


def test_context_is_grouped_in_request_order(catalog, store, embedding, llm):
    _seed(store)
    _use_case(catalog, store, embedding, llm).execute(
        CrossTopicQueryRequest(topics=["cloud", "pentesting"], question="q")
    )
    prompt = llm.prompts[0]
    assert prompt.index("[CLOUD] iam.md:") < prompt.index("[PENTESTING] p.pdf:")
    assert "cloud, pentesting" in prompt


def test_all_topics_failing_raises(catalog, store, embedding, llm):
    res = _use_case(catalog, store, embedding, llm).execute(
        CrossTopicQueryRequest(topics=["quantum", "astro"], question="q")
    )
    assert isinstance(res.error, NoTopicsSucceededError)
    assert set(res.error.reasons) == {"quantum", "astro"}
    assert llm.prompts == []


def test_backend_failure_in_one_topic_only_skips_it(catalog, store, embedding, llm):
    _seed(store)
    store.fail_search.add("cloud_docs")
    res = _use_case(catalog, store, embedding, llm).execute(
        CrossTopicQueryRequest(topics=["pentesting", "cloud"], question="q")
    )
    assert res.value.topics == ["pentesting"]
    assert res.value.skipped_topics == ["cloud"]


def test_slow_topic_is_skipped_after_timeout(catalog, store, embedding, llm, monkeypatch):
    _seed(store)
    release = threading.Event()
    original = store.search

    def slow_search(collection, vector, top_k):
        if collection == "cloud_docs":
            release.wait(5)
        return original(collection, vector, top_k)

    monkeypatch.setattr(store, "search", slow_search)
    try:
        res = _use_case(catalog, store, embedding, llm, topic_timeout_s=0.2).execute(
            CrossTopicQueryRequest(topics=["pentesting", "cloud"], question="q")
        )
    finally:
        release.set()

    assert res.value.topics == ["pentesting"]
    assert res.value.skipped_topics == ["cloud"]


def test_retrieve_all_reports_every_outcome(catalog, store, embedding, llm):
    _seed(store)
    store.fail_search.add("forensics_docs")
    outcomes = _use_case(catalog, store, embedding, llm).retrieve_all(
        ["cloud", "nope", "forensics"], (1.0, 1.0, 1.0, 1.0)
    )
    assert [(o.topic, o.status) for o in outcomes] == [
        ("cloud", "success"),
        ("nope", "skipped"),
        ("forensics", "error"),
    ]
    assert outcomes[1].reason == "unknown topic"


@pytest.mark.parametrize(
    "topics, question", [([], "q"), (["  "], "q"), (["cloud"], "")]
)
def test_invalid_requests(catalog, store, embedding, llm, topics, question):
    res = _use_case(catalog, store, embedding, llm).execute(
        CrossTopicQueryRequest(topics=topics, question=question)
    )
    assert isinstance(res.error, ValidationError)


def test_duplicate_topics_are_queried_once(catalog, store, embedding, llm):
    _seed(store)
    res = _use_case(catalog, store, embedding, llm).execute(
        CrossTopicQueryRequest(topics=["cloud", "cloud"], question="q")
    )
    assert res.value.topics == ["cloud"]
    assert res.value.source_count == 1


def test_generation_failure(catalog, store, embedding, llm):
    _seed(store)
    llm.fail = True
    res = _use_case(catalog, store, embedding, llm).execute(
        CrossTopicQueryRequest(topics=["cloud"], question="q")
    )
    assert isinstance(res.error, GenerationError)
