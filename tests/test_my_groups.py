def test_my_groups_unknown_user(client):
    response = client.get("/api/groups/my/999")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "User not found"}


def test_my_groups_teacher(client, factory):
    """Учитель видит свои группы, новые первыми, со счётчиками"""
    teacher = factory.teacher()
    older = factory.group(teacher, name="Older")
    newer = factory.group(teacher, name="Newer")
    factory.group(factory.teacher(), name="Someone else's")
    factory.member(older, factory.student())
    factory.assignment(newer)

    response = client.get(f"/api/groups/my/{teacher.id}")
    assert response.status_code == 200
    groups = response.json()["result"]["groups"]
    assert [g["id"] for g in groups] == [newer.id, older.id]
    assert groups[0]["assignment_count"] == 1
    assert groups[1]["student_count"] == 1
    assert "completion_rate" not in groups[0]


def test_my_groups_student_completion_rate(client, factory):
    """Студент видит группы, где состоит, и свой процент выполнения"""
    teacher = factory.teacher()
    student = factory.student()
    group = factory.group(teacher)
    factory.group(teacher)  # не вступал
    factory.member(group, student)
    assignments = [factory.assignment(group) for _ in range(4)]
    factory.complete(assignments[0], student)

    groups = client.get(f"/api/groups/my/{student.id}").json()["result"]["groups"]
    assert len(groups) == 1
    assert groups[0]["id"] == group.id
    assert groups[0]["assignment_count"] == 4
    assert groups[0]["completed_assignments"] == 1
    assert groups[0]["completion_rate"] == 25


def test_my_groups_student_no_assignments(client, factory):
    """assignment_count=0 даёт completion_rate=0"""
    student = factory.student()
    group = factory.group(factory.teacher())
    factory.member(group, student)

    groups = client.get(f"/api/groups/my/{student.id}").json()["result"]["groups"]
    assert groups[0]["assignment_count"] == 0
    assert groups[0]["completion_rate"] == 0


def test_my_groups_student_latest_join_first(client, factory):
    student = factory.student()
    teacher = factory.teacher()
    first = factory.group(teacher)
    second = factory.group(teacher)
    factory.member(first, student)
    factory.member(second, student)

    groups = client.get(f"/api/groups/my/{student.id}").json()["result"]["groups"]
    assert [g["id"] for g in groups] == [second.id, first.id]
