def _post_journal(client, c, who, pillar="deen", content="Prayed fajr on time", **extra):
    resp = client.post(
        f"/circles/{c['circle']['id']}/journals",
        json={"pillar": pillar, "content": content, **extra},
        headers=c["headers"][who],
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["journal"]


def test_create_and_fetch_journal(client, circle_with_members):
    c = circle_with_members
    journal = _post_journal(client, c, "alice", title="Morning")
    assert journal["pillar"] == "deen"
    assert journal["commentCount"] == 0
    assert journal["user"]["handle"] == "alice"

    resp = client.get(f"/circles/{c['circle']['id']}/journals/{journal['id']}", headers=c["headers"]["bob"])
    assert resp.status_code == 200
    assert resp.get_json()["journal"]["title"] == "Morning"


def test_feed_paginates_newest_first(client, circle_with_members):
    c = circle_with_members
    ids = [_post_journal(client, c, "alice", content=f"entry {i}")["id"] for i in range(3)]
    _post_journal(client, c, "bob", pillar="body", content="ran 5k")

    url = f"/circles/{c['circle']['id']}/journals"
    body = client.get(f"{url}?page=1&limit=2&pillar=deen", headers=c["headers"]["carol"]).get_json()
    assert [j["id"] for j in body["journals"]] == [ids[2], ids[1]]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    body = client.get(url, headers=c["headers"]["carol"]).get_json()
    assert body["pagination"]["total"] == 4


def test_feed_pagination_falls_back_on_bad_numbers(client, circle_with_members):
    c = circle_with_members
    _post_journal(client, c, "alice")

    url = f"/circles/{c['circle']['id']}/journals"
    resp = client.get(f"{url}?page=abc&limit=xyz", headers=c["headers"]["bob"])
    assert resp.status_code == 200
    assert resp.get_json()["pagination"] == {"page": 1, "limit": 20, "total": 1, "pages": 1}

    resp = client.get(f"{url}?page=0&limit=500", headers=c["headers"]["bob"])
    assert resp.get_json()["pagination"]["page"] == 1
    assert resp.get_json()["pagination"]["limit"] == 100


def test_my_journals_route_is_not_shadowed(client, circle_with_members):
    c = circle_with_members
    mine = _post_journal(client, c, "alice")
    _post_journal(client, c, "bob")
    resp = client.get(f"/circles/{c['circle']['id']}/journals/me", headers=c["headers"]["alice"])
    assert resp.status_code == 200
    assert [j["id"] for j in resp.get_json()["journals"]] == [mine["id"]]


def test_my_journals_date_filter(client, circle_with_members):
    c = circle_with_members
    _post_journal(client, c, "alice")
    resp = client.get(f"/circles/{c['circle']['id']}/journals/me?date=2000-01-01", headers=c["headers"]["alice"])
    assert resp.get_json()["journals"] == []


def test_journal_from_other_circle_is_not_found(client, circle_with_members):
    c = circle_with_members
    other = client.post("/circles", json={"name": "Other"}, headers=c["headers"]["dave"]).get_json()["circle"]
    resp = client.post(
        f"/circles/{other['id']}/journals", json={"pillar": "mind", "content": "read"}, headers=c["headers"]["dave"]
    )
    foreign = resp.get_json()["journal"]
    resp = client.get(f"/circles/{c['circle']['id']}/journals/{foreign['id']}", headers=c["headers"]["alice"])
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Journal not found"}


def test_comments(client, circle_with_members):
    c = circle_with_members
    journal = _post_journal(client, c, "alice")
    base = f"/circles/{c['circle']['id']}/journals/{journal['id']}"

    resp = client.post(f"{base}/comments", json={"content": "MashaAllah"}, headers=c["headers"]["bob"])
    assert resp.status_code == 201
    comment = resp.get_json()["comment"]
    assert comment["user"]["handle"] == "bob"

    detail = client.get(base, headers=c["headers"]["alice"]).get_json()["journal"]
    assert detail["commentCount"] == 1
    assert detail["comments"][0]["content"] == "MashaAllah"

    # only the author may delete
    resp = client.delete(f"{base}/comments/{comment['id']}", headers=c["headers"]["alice"])
    assert resp.status_code == 404
    resp = client.delete(f"{base}/comments/{comment['id']}", headers=c["headers"]["bob"])
    assert resp.status_code == 200


def test_delete_journal_own_only(client, circle_with_members):
    c = circle_with_members
    journal = _post_journal(client, c, "alice")
    url = f"/circles/{c['circle']['id']}/journals/{journal['id']}"
    client.post(f"{url}/comments", json={"content": "nice"}, headers=c["headers"]["bob"])

    assert client.delete(url, headers=c["headers"]["bob"]).status_code == 404
    resp = client.delete(url, headers=c["headers"]["alice"])
    assert resp.status_code == 200
    assert client.get(url, headers=c["headers"]["alice"]).status_code == 404


def test_journal_validation(client, circle_with_members):
    c = circle_with_members
    resp = client.post(
        f"/circles/{c['circle']['id']}/journals", json={"pillar": "wealth", "content": ""}, headers=c["headers"]["alice"]
    )
    assert resp.status_code == 400
    assert {d["field"] for d in resp.get_json()["details"]} == {"pillar", "content"}
