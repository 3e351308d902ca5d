from datetime import timedelta
from quizroom import create_app, get_services
from quizroom.firebase_init import get_auth
from quizroom import firestore_dao as dao
from quizroom.firestore_models import Question, User


def seed_database():
    app = create_app()
    with app.app_context():
        auth = get_auth()
        services = get_services()
        db = services.db

        password = 'password123'

        print("Creating users...")

        def create_firebase_user(email, display_name):
            try:
                fb_user = auth.create_user(email=email, password=password, display_name=display_name)
            except auth.EmailAlreadyExistsError:
                fb_user = auth.get_user_by_email(email)
            dao.create_user(db, User(id=fb_user.uid, name=display_name, email=email))
            return fb_user.uid

        teacher_uid = create_firebase_user('teacher@example.com', 'Grace Teacher')
        student_uid = create_firebase_user('student@example.com', 'Sam Student')

        print("Creating classroom...")
        result = services.classrooms.create_classroom(teacher_uid, 'Intro to Testing 2025')
        if not result.ok:
            print(f"  could not create classroom: {result}")
            return
        classroom = result.value

        print("Enrolling student...")
        services.classrooms.join_classroom(student_uid, classroom.password)

        print("Creating quiz...")
        services.quizzes.create_quiz(
            classroom.id,
            'Quiz One',
            dao.utcnow() + timedelta(days=7),
            [
                Question(question='What does a unit test check?',
                         options=['One small piece of behavior', 'The whole deployment'],
                         answer='One small piece of behavior'),
                Question(question='Which runner does this project use?',
                         options=['pytest', 'nose', 'trial'],
                         answer='pytest'),
            ],
        )

        print("\n" + "=" * 60)
        print("    Test accounts")
        print("=" * 60)
        print("\n[Teacher] teacher@example.com")
        print("[Student] student@example.com")
        print(f"  password: {password} (both)")
        print(f"\n[Classroom password] {classroom.password}")
        print("\n" + "=" * 60)
        print("Seed complete!")


if __name__ == '__main__':
    seed_database()
