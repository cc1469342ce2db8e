import pytest

from database import ScoreDatabase, format_date, format_login_time, hash_password


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "scores.db")


@pytest.fixture
def db(db_path):
    database = ScoreDatabase(db_path)
    yield database
    database.close()


def test_register_validation(db):
    assert not db.register_user("ab", "secret")['success']
    assert not db.register_user("alice", "abc")['success']
    assert db.register_user("alice", "secret")['success']

    duplicate = db.register_user("alice", "other")
    assert not duplicate['success']
    assert "exists" in duplicate['message']


def test_password_is_not_stored_in_plain_text(db):
    db.register_user("alice", "secret")
    row = db.conn.execute("SELECT password FROM users WHERE username = 'alice'").fetchone()
    assert row['password'] == hash_password("secret")
    assert row['password'] != "secret"


def test_login(db):
    db.register_user("alice", "secret")

    assert not db.login_user("bob", "secret")['success']
    assert not db.login_user("alice", "wrong")['success']

    result = db.login_user("alice", "secret")
    assert result['success']
    assert result['user']['username'] == "alice"

    current = db.get_current_user()
    assert current['username'] == "alice"
    assert current['login_time'] == result['login_time']
    assert current['last_login'] == result['login_time']


def test_session_survives_reopen(db_path):
    db = ScoreDatabase(db_path)
    db.register_user("alice", "secret")
    db.login_user("alice", "secret")
    db.close()

    db = ScoreDatabase(db_path)
    assert db.get_current_user()['username'] == "alice"
    db.logout_user()
    assert db.get_current_user() is None
    db.close()


def test_session_for_missing_user_is_dropped(db):
    db.register_user("alice", "secret")
    db.login_user("alice", "secret")
    db.conn.execute("DELETE FROM users WHERE username = 'alice'")
    db.conn.commit()

    assert db.get_current_user() is None
    assert db._get_session() is None


def test_scores_and_stats(db):
    db.register_user("alice", "secret")
    db.login_user("alice", "secret")

    assert not db.save_score("nobody", 10)
    assert db.get_user_stats("nobody") is None

    stats = db.get_user_stats("alice")
    assert stats == {'total_games': 0, 'high_score': 0, 'avg_score': 0, 'recent_scores': []}

    for score in (10, 40, 20):
        assert db.save_score("alice", score)

    stats = db.get_user_stats("alice")
    assert stats['total_games'] == 3
    assert stats['high_score'] == 40
    assert stats['avg_score'] == 23
    assert [s['score'] for s in stats['recent_scores']] == [20, 40, 10]


def test_recent_scores_limited_to_ten(db):
    db.register_user("alice", "secret")
    for score in range(0, 150, 10):
        db.save_score("alice", score)

    recent = db.get_user_stats("alice")['recent_scores']
    assert len(recent) == 10
    assert recent[0]['score'] == 140


def test_leaderboard_order_and_limit(db):
    db.register_user("alice", "secret")
    db.register_user("bobby", "secret")
    db.save_score("alice", 30)
    db.save_score("bobby", 50)
    db.save_score("alice", 50)
    db.save_score("bobby", 10)

    board = db.get_leaderboard()
    assert [(e['username'], e['score']) for e in board] == [
        ("alice", 50), ("bobby", 50), ("alice", 30), ("bobby", 10)
    ]
    assert len(db.get_leaderboard(limit=2)) == 2


def test_guest_scores_are_not_persisted(db):
    result = db.login_as_guest()
    assert result['success']
    guest = result['user']
    assert guest['is_guest']
    assert guest['username'].startswith("guest_")

    assert db.save_score(guest['username'], 100)
    assert db.get_leaderboard() == []
    assert db.get_user_stats(guest['username'])['total_games'] == 0


def test_guest_session_is_not_restored(db_path):
    db = ScoreDatabase(db_path)
    db.login_as_guest()
    db.close()

    db = ScoreDatabase(db_path)
    assert db.get_current_user() is None
    # Сессия сброшена, повторное чтение тоже пустое
    assert db._get_session() is None
    db.close()


def test_format_date():
    assert format_date("2024-01-05T09:07:00") == "2024/01/05 09:07"
    assert format_login_time("2024-01-05T09:07:00").endswith("2024/01/05 09:07")
