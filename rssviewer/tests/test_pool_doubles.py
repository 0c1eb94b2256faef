from rssviewer.storage.dao import as_records


def test_query_failure_becomes_500_envelope(fake_client, fake_pools):
    fake_pools.news.error = RuntimeError("relation \"news\" does not exist")
    r = fake_client.get("/api/news")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "details": "relation \"news\" does not exist"}


def test_failure_is_scoped_to_one_pool(fake_client, fake_pools):
    fake_pools.prices.error = ConnectionRefusedError("connection refused")
    fake_pools.sentiment.rows = [{"source": "reddit", "count": 4}]

    assert fake_client.get("/api/securities/BTC").status_code == 500
    r = fake_client.get("/api/sentiment/sources")
    assert r.status_code == 200
    assert r.json() == [{"source": "reddit", "count": 4}]


def test_every_endpoint_reports_errors_the_same_way(fake_client, fake_pools):
    for _, pool in fake_pools:
        pool.error = RuntimeError("down")
    for path in ["/api/news", "/api/sources", "/api/sentiment", "/api/sentiment/sources",
                 "/api/sentiment/securities", "/api/securities/BTC"]:
        r = fake_client.get(path)
        assert r.status_code == 500, path
        assert r.json() == {"error": "Internal server error", "details": "down"}


def test_malformed_result_is_empty(fake_client, fake_pools):
    fake_pools.prices.rows = {"rows": "not a list"}
    fake_pools.news.rows = None
    r = fake_client.get("/api/securities/BTC")
    assert r.status_code == 200
    assert r.json() == []
    assert fake_client.get("/api/news").json() == {"total": 0, "items": []}


def test_endpoint_pool_routing(fake_client, fake_pools):
    fake_client.get("/api/news")
    fake_client.get("/api/sources")
    fake_client.get("/api/sentiment")
    fake_client.get("/api/sentiment/sources")
    fake_client.get("/api/sentiment/securities")
    fake_client.get("/api/securities/BTC")

    news_sql = [s.text for s in fake_pools.news.statements]
    sentiment_sql = [s.text for s in fake_pools.sentiment.statements]
    price_sql = [s.text for s in fake_pools.prices.statements]

    # count + page for /api/news, then the grouped sources
    assert len(news_sql) == 3
    assert all("FROM news" in s for s in news_sql)
    assert len(sentiment_sql) == 3
    assert all("FROM sentiment" in s for s in sentiment_sql)
    assert price_sql == [
        "SELECT security_name, date, open, high, low, close, volume FROM securities "
        "WHERE security_name = :p1 ORDER BY date ASC"
    ]


def test_news_count_and_page_share_predicate(fake_client, fake_pools):
    fake_pools.news.responses = [
        [{"total": 2}],
        [{"id": 1, "source": "Reuters", "title": "t", "description": None, "link": None,
          "fetched_at": "not a timestamp"}],
    ]
    r = fake_client.get("/api/news", params={"sources": "Reuters,CoinDesk", "page": 2, "limit": 1})
    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 2
    assert data["items"][0]["published"] is None

    count_stmt, page_stmt = fake_pools.news.statements
    assert count_stmt.text == "SELECT COUNT(*) AS total FROM news WHERE source IN :p1"
    assert page_stmt.text.endswith("WHERE source IN :p1 ORDER BY fetched_at DESC LIMIT :p2 OFFSET :p3")
    assert page_stmt._bindparams["p2"].value == 1
    assert page_stmt._bindparams["p3"].value == 1


def test_health_db_reports_per_pool(fake_client, fake_pools):
    fake_pools.sentiment.error = RuntimeError("down")
    r = fake_client.get("/api/health/db")
    assert r.status_code == 200
    assert r.json() == {"news": True, "prices": True, "sentiment": False}


def test_as_records():
    assert as_records(None) == []
    assert as_records("oops") == []
    assert as_records([{"a": 1}, "junk"]) == [{"a": 1}]


def test_null_columns_still_use_the_envelope(fake_client, fake_pools):
    fake_pools.news.responses = [
        [{"total": 1}],
        [{"id": 1, "source": "Reuters", "title": None, "description": None, "link": None, "fetched_at": None}],
        [{"source": None, "count": 3}],
    ]
    for path in ["/api/news", "/api/sources"]:
        r = fake_client.get(path)
        assert r.status_code == 500, path
        body = r.json()
        assert body["error"] == "Internal server error"
        assert body["details"]


def test_missing_column_uses_the_envelope(fake_client, fake_pools):
    fake_pools.sentiment.rows = [{"source": "reddit"}]
    r = fake_client.get("/api/sentiment/sources")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "details": "'count'"}
