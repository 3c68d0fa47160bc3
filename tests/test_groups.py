import threading

import pytest

from app.config import Settings
from app.core.exceptions import Conflict, StoreError
from app.database.memory_store import InMemoryDocumentStore
from app.modules.auth.schemas import Identity
from app.modules.groups.models import GROUPS
from app.modules.groups.service import GroupService
from app.modules.users.models import USERS


@pytest.fixture
def alice(make_user):
    return make_user("alice@x.com", "alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob@x.com", "bob")


def create_group(client, headers, users, name="team"):
    response = client.post("/api/group", json={"groupName": name, "users": users}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["groupId"]


def test_creator_is_first_member(client, store, alice):
    alice_id, headers = alice

    group_id = create_group(client, headers, ["u2", alice_id, "u2", "u3"])

    group = store.get(GROUPS, group_id)
    assert group["creator_id"] == alice_id
    assert group["users"] == [alice_id, "u2", "u3"]
    assert group["version"] == 0


@pytest.mark.parametrize("payload", [
    {"groupName": "team", "users": []},
    {"groupName": "", "users": ["u2"]},
    {"users": ["u2"]},
])
def test_create_group_validation(client, alice, payload):
    _, headers = alice

    assert client.post("/api/group", json=payload, headers=headers).status_code == 400


def test_list_groups_only_where_member(client, alice, bob):
    alice_id, alice_headers = alice
    bob_id, bob_headers = bob
    shared = create_group(client, alice_headers, [bob_id], name="shared")
    create_group(client, alice_headers, ["u9"], name="private")

    groups = client.get("/api/groups", headers=bob_headers).json()

    assert [g["id"] for g in groups] == [shared]
    assert groups[0]["groupName"] == "shared"
    assert groups[0]["creatorId"] == alice_id
    assert len(client.get("/api/groups", headers=alice_headers).json()) == 2


def test_add_user_by_creator(client, store, alice, bob):
    alice_id, alice_headers = alice
    bob_id, _ = bob
    group_id = create_group(client, alice_headers, ["u2"])

    response = client.post(f"/api/groups/{group_id}/add-user", json={"email": "bob@x.com"}, headers=alice_headers)

    assert response.status_code == 200
    group = store.get(GROUPS, group_id)
    assert group["users"] == [alice_id, "u2", bob_id]
    assert group["version"] == 1


def test_add_existing_member_reports_conflict(client, store, alice, bob):
    _, alice_headers = alice
    bob_id, _ = bob
    group_id = create_group(client, alice_headers, [bob_id])
    before = store.get(GROUPS, group_id)

    response = client.post(f"/api/groups/{group_id}/add-user", json={"email": "bob@x.com"}, headers=alice_headers)

    assert response.status_code == 400
    assert "already" in response.json()["message"]
    assert store.get(GROUPS, group_id) == before


def test_add_user_by_non_creator_is_forbidden(client, store, alice, bob):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    group_id = create_group(client, alice_headers, [bob_id])

    response = client.post(f"/api/groups/{group_id}/add-user", json={"email": "alice@x.com"}, headers=bob_headers)

    assert response.status_code == 403


def test_add_user_email_ignores_case(client, store, alice, make_user):
    _, alice_headers = alice
    carol_id, _ = make_user("Carol@X.com", "carol")
    group_id = create_group(client, alice_headers, ["u2"])

    assert store.get(USERS, carol_id)["email"] == "carol@x.com"
    response = client.post(f"/api/groups/{group_id}/add-user", json={"email": "carol@x.com"}, headers=alice_headers)

    assert response.status_code == 200
    assert carol_id in store.get(GROUPS, group_id)["users"]
    again = client.post(f"/api/groups/{group_id}/add-user", json={"email": "CAROL@x.com"}, headers=alice_headers)
    assert again.status_code == 400


def test_add_unknown_user(client, alice):
    _, headers = alice
    group_id = create_group(client, headers, ["u2"])

    response = client.post(f"/api/groups/{group_id}/add-user", json={"email": "ghost@x.com"}, headers=headers)

    assert response.status_code == 404


def test_add_user_to_missing_group(client, alice):
    _, headers = alice

    response = client.post("/api/groups/missing/add-user", json={"email": "alice@x.com"}, headers=headers)

    assert response.status_code == 404


def test_reassign_creator(client, store, alice, bob):
    _, alice_headers = alice
    bob_id, bob_headers = bob
    group_id = create_group(client, alice_headers, [bob_id])

    response = client.patch(f"/api/groups/{group_id}", json={"creatorId": bob_id}, headers=alice_headers)

    assert response.status_code == 200
    assert store.get(GROUPS, group_id)["creator_id"] == bob_id
    assert client.patch(f"/api/groups/{group_id}", json={"creatorId": bob_id}, headers=alice_headers).status_code == 403
    assert client.post(f"/api/group/{group_id}/task", json={
        "name": "t", "status": "pending", "assignedUser": bob_id,
    }, headers=bob_headers).status_code == 201


def test_reassign_creator_by_non_creator_is_forbidden(client, store, alice, bob):
    alice_id, alice_headers = alice
    bob_id, bob_headers = bob
    group_id = create_group(client, alice_headers, [bob_id])

    response = client.patch(f"/api/groups/{group_id}", json={"creatorId": bob_id}, headers=bob_headers)

    assert response.status_code == 403
    assert store.get(GROUPS, group_id)["creator_id"] == alice_id


def test_reassign_creator_to_non_member(client, store, alice):
    alice_id, headers = alice
    group_id = create_group(client, headers, ["u2"])

    response = client.patch(f"/api/groups/{group_id}", json={"creatorId": "outsider"}, headers=headers)

    assert response.status_code == 400
    assert store.get(GROUPS, group_id)["creator_id"] == alice_id


def test_reassign_creator_requires_auth(client, alice):
    _, headers = alice
    group_id = create_group(client, headers, ["u2"])

    assert client.patch(f"/api/groups/{group_id}", json={"creatorId": "u2"}).status_code == 401


class RacingStore(InMemoryDocumentStore):
    """Lets another writer land between a group read and its conditional write."""

    def __init__(self, competing_member: str, races: int = 1):
        super().__init__()
        self.competing_member = competing_member
        self.races = races

    def update(self, collection, doc_id, fields, if_match=None):
        if collection == GROUPS and if_match and self.races > 0:
            self.races -= 1
            current = self.get(collection, doc_id)
            super().update(collection, doc_id, {
                "users": current["users"] + [self.competing_member],
                "version": current["version"] + 1,
            })
        return super().update(collection, doc_id, fields, if_match)


def seed(store, creator="owner"):
    store.set(USERS, {"email": "new@x.com", "username": "new", "password": "x"}, doc_id="new-user")
    return store.set(GROUPS, {"group_name": "g", "creator_id": creator, "users": [creator], "version": 0})


def test_concurrent_membership_write_is_not_lost():
    store = RacingStore(competing_member="other-user")
    group_id = seed(store)

    GroupService(store).add_member(group_id, "new@x.com", Identity(uid="owner"))

    group = store.get(GROUPS, group_id)
    assert group["users"] == ["owner", "other-user", "new-user"]
    assert group["version"] == 2


def test_concurrent_add_of_same_user_reports_conflict():
    store = RacingStore(competing_member="new-user")
    group_id = seed(store)

    with pytest.raises(Conflict):
        GroupService(store).add_member(group_id, "new@x.com", Identity(uid="owner"))

    assert store.get(GROUPS, group_id)["users"] == ["owner", "new-user"]


def test_membership_write_gives_up_after_retries():
    store = RacingStore(competing_member="noise", races=100)
    group_id = seed(store)
    service = GroupService(store, Settings(_env_file=None, membership_update_retries=3))

    with pytest.raises(StoreError):
        service.add_member(group_id, "new@x.com", Identity(uid="owner"))

    assert "new-user" not in store.get(GROUPS, group_id)["users"]


def test_parallel_adds_for_different_users_all_land():
    store = InMemoryDocumentStore()
    group_id = store.set(GROUPS, {"group_name": "g", "creator_id": "owner", "users": ["owner"], "version": 0})
    emails = [f"user{i}@x.com" for i in range(8)]
    for i, email in enumerate(emails):
        store.set(USERS, {"email": email, "username": f"user{i}", "password": "x"}, doc_id=f"user{i}")
    service = GroupService(store, Settings(_env_file=None, membership_update_retries=50))

    threads = [
        threading.Thread(target=service.add_member, args=(group_id, email, Identity(uid="owner")))
        for email in emails
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    group = store.get(GROUPS, group_id)
    assert sorted(group["users"]) == sorted(["owner"] + [f"user{i}" for i in range(8)])
    assert group["version"] == 8
