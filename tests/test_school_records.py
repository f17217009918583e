"""
Classes, teacher profiles and student profiles.
"""
import uuid
from datetime import date

import pytest

from school_admin.core.errors import Conflict, Gone, InvalidRequest, NotFound, TenantRequired
from school_admin.core.permissions import Role
from school_admin.models import AcademicSession, InstituteClass, User
from school_admin.schemas.school import (
    ClassCreateSchema, ClassUpdateSchema, StudentCreateSchema, StudentUpdateSchema, TeacherCreateSchema
)
from school_admin.services import class_service, student_service, teacher_service, user_service


@pytest.fixture
def school(db, make_institute, make_user):
    institute = make_institute()
    session = AcademicSession(
        institute_id=institute.id, name="2024-2025",
        start_date=date(2024, 4, 1), end_date=date(2025, 3, 31),
    )
    db.add(session)
    db.commit()
    return dict(
        institute=institute,
        session=session,
        admin=make_user(Role.INSTITUTE_ADMIN, institute),
    )


# =====================================================
# CLASSES
# =====================================================

def test_class_lifecycle(db, school, acting_as):
    with acting_as(school["admin"]):
        created = class_service.create_class(
            db, ClassCreateSchema(academic_session_id=school["session"].id, name="Class 5", section="b")
        )
        assert created.section == "B"
        assert created.strength == 0

        with pytest.raises(Conflict):
            class_service.create_class(
                db, ClassCreateSchema(academic_session_id=school["session"].id, name="Class 5", section="B")
            )

        other = class_service.create_class(
            db, ClassCreateSchema(academic_session_id=school["session"].id, name="Class 4")
        )
        items, total, _, _ = class_service.list_classes(db)
        assert [c.id for c in items] == [other.id, created.id]

        with pytest.raises(Conflict):
            class_service.update_class(db, other.id, ClassUpdateSchema(name="Class 5", section="B"))

        class_service.delete_class(db, created.id)
        with pytest.raises(Gone):
            class_service.get_class(db, created.id)
        _, total, _, _ = class_service.list_classes(db)
        assert total == 1


def test_class_needs_session_of_same_institute(db, school, make_institute, make_user, acting_as):
    outsider = make_user(Role.INSTITUTE_ADMIN, make_institute())
    with acting_as(outsider):
        with pytest.raises(NotFound):
            class_service.create_class(
                db, ClassCreateSchema(academic_session_id=school["session"].id, name="Class 1")
            )

    with pytest.raises(TenantRequired):
        class_service.list_classes(db)


# =====================================================
# TEACHERS
# =====================================================

def test_teacher_profile_links_user(db, school, make_user, acting_as):
    user = make_user(Role.TEACHER, school["institute"])
    with acting_as(school["admin"]):
        teacher = teacher_service.create_teacher(
            db,
            TeacherCreateSchema(
                user_id=user.id, department="Science", subjects=["Physics"],
                qualification=[{"degree": "M.Sc", "university": "Pune", "year": 2015}],
            ),
        )
        db.refresh(user)
        assert user.profile_id == teacher.id
        assert teacher.designation == "Assistant Teacher"
        assert teacher.qualification[0]["degree"] == "M.Sc"

        with pytest.raises(Conflict):
            teacher_service.create_teacher(db, TeacherCreateSchema(user_id=user.id))

        teacher_service.delete_teacher(db, teacher.id)
        db.refresh(user)
        assert user.profile_id is None


def test_teacher_profile_can_be_recreated_after_delete(db, school, make_user, acting_as):
    user = make_user(Role.TEACHER, school["institute"])
    with acting_as(school["admin"]):
        first = teacher_service.create_teacher(db, TeacherCreateSchema(user_id=user.id))
        teacher_service.delete_teacher(db, first.id)

        waiting, _, _, _ = user_service.list_users_without_profile(db, role="TEACHER")
        assert user.id in [u.id for u in waiting]

        second = teacher_service.create_teacher(db, TeacherCreateSchema(user_id=user.id))
        db.refresh(user)
        assert second.id != first.id
        assert user.profile_id == second.id

        with pytest.raises(Conflict):
            teacher_service.create_teacher(db, TeacherCreateSchema(user_id=user.id))


def test_teacher_profile_rules(db, school, make_institute, make_user, acting_as):
    student_user = make_user(Role.STUDENT, school["institute"])
    foreign_teacher = make_user(Role.TEACHER, make_institute())
    with acting_as(school["admin"]):
        with pytest.raises(InvalidRequest):
            teacher_service.create_teacher(db, TeacherCreateSchema(user_id=student_user.id))
        with pytest.raises(NotFound):
            teacher_service.create_teacher(db, TeacherCreateSchema(user_id=foreign_teacher.id))


# =====================================================
# STUDENTS
# =====================================================

def _class(db, school, name="Class 6"):
    return class_service.create_class(db, ClassCreateSchema(academic_session_id=school["session"].id, name=name))


def test_student_profile_tracks_class_strength(db, school, make_user, acting_as):
    user = make_user(Role.STUDENT, school["institute"])
    with acting_as(school["admin"]):
        six, seven = _class(db, school), _class(db, school, "Class 7")
        student = student_service.create_student(
            db, StudentCreateSchema(user_id=user.id, admission_number=" ADM-1 ", current_class_id=six.id)
        )
        assert student.admission_number == "ADM-1"
        db.refresh(six)
        assert six.strength == 1

        student_service.update_student(db, student.id, StudentUpdateSchema(current_class_id=seven.id))
        db.refresh(six)
        db.refresh(seven)
        assert (six.strength, seven.strength) == (0, 1)

        student_service.delete_student(db, student.id)
        db.refresh(seven)
        db.refresh(user)
        assert seven.strength == 0
        assert user.profile_id is None


def test_student_profile_can_be_recreated_after_delete(db, school, make_user, acting_as):
    user = make_user(Role.STUDENT, school["institute"])
    with acting_as(school["admin"]):
        first = student_service.create_student(db, StudentCreateSchema(user_id=user.id, admission_number="ADM-1"))
        student_service.delete_student(db, first.id)

        # admission numbers stay taken by deleted records
        with pytest.raises(Conflict):
            student_service.create_student(db, StudentCreateSchema(user_id=user.id, admission_number="ADM-1"))

        second = student_service.create_student(db, StudentCreateSchema(user_id=user.id, admission_number="ADM-2"))
        db.refresh(user)
        assert user.profile_id == second.id


def test_student_profile_rules(db, school, make_user, acting_as):
    first = make_user(Role.STUDENT, school["institute"])
    second = make_user(Role.STUDENT, school["institute"])
    teacher = make_user(Role.TEACHER, school["institute"])
    with acting_as(school["admin"]):
        student_service.create_student(db, StudentCreateSchema(user_id=first.id, admission_number="ADM-1"))

        with pytest.raises(Conflict):
            student_service.create_student(db, StudentCreateSchema(user_id=second.id, admission_number="ADM-1"))
        with pytest.raises(InvalidRequest):
            student_service.create_student(db, StudentCreateSchema(user_id=teacher.id, admission_number="ADM-2"))
        with pytest.raises(NotFound):
            student_service.create_student(
                db,
                StudentCreateSchema(
                    user_id=second.id, admission_number="ADM-3",
                    current_class_id="00000000-0000-0000-0000-000000000009",
                ),
            )


def test_teacher_sees_students_of_own_classes(db, school, make_user, acting_as):
    teacher_user = make_user(Role.TEACHER, school["institute"])
    pupils = [make_user(Role.STUDENT, school["institute"]) for _ in range(2)]

    with acting_as(school["admin"]):
        teacher = teacher_service.create_teacher(db, TeacherCreateSchema(user_id=teacher_user.id))
        mine = class_service.create_class(
            db,
            ClassCreateSchema(academic_session_id=school["session"].id, name="Class 8", class_teacher_id=teacher.id),
        )
        other = _class(db, school, "Class 9")
        student_service.create_student(
            db, StudentCreateSchema(user_id=pupils[0].id, admission_number="A1", current_class_id=mine.id)
        )
        student_service.create_student(
            db, StudentCreateSchema(user_id=pupils[1].id, admission_number="A2", current_class_id=other.id)
        )

    with acting_as(teacher_user):
        students, total, _, _ = student_service.list_my_students(db)
        assert total == 1
        assert students[0].user_id == pupils[0].id
        assert teacher_service.get_my_profile(db).id == teacher.id


@pytest.mark.anyio
async def test_school_record_endpoints(client, db, school, make_user, auth_headers):
    headers = auth_headers(school["admin"])
    user = make_user(Role.STUDENT, school["institute"])

    r = await client.post(
        "/v1/institute-class/create",
        json={"academic_session_id": str(school["session"].id), "name": "Class 3"},
        headers=headers,
    )
    assert r.status_code == 201
    class_id = r.json()["id"]

    r = await client.post(
        "/v1/student/create",
        json={"user_id": str(user.id), "admission_number": "ADM-9", "current_class_id": class_id},
        headers=headers,
    )
    assert r.status_code == 201

    r = await client.get("/v1/student/get-all", params={"class_id": class_id}, headers=headers)
    assert r.json()["pagination"]["total"] == 1

    r = await client.get("/v1/user/get-users-without-profile", params={"role": "STUDENT"}, headers=headers)
    assert r.json()["pagination"]["total"] == 0

    r = await client.get("/v1/student/my-profile", headers=auth_headers(user))
    assert r.status_code == 200
    assert r.json()["admission_number"] == "ADM-9"

    r = await client.get(f"/v1/institute-class/{class_id}/get-details", headers=auth_headers(user))
    assert r.status_code == 200
    assert r.json()["strength"] == 1

    r = await client.delete(f"/v1/institute-class/{class_id}/delete", headers=auth_headers(user))
    assert r.status_code == 403
    assert db.get(InstituteClass, uuid.UUID(class_id)).is_deleted is False
    assert db.query(User).count() == 2
