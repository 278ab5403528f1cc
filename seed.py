from myblog.auth import get_password_hash
from myblog.database import SessionLocal, engine, Base
from myblog.models import Comment, CommentLike, Like, Post, Profile, User
from myblog.services.slugify import slugify

# Create tables
Base.metadata.create_all(bind=engine)

db = SessionLocal()

# Clear existing data (cascades remove posts, comments and likes)
for user in db.query(User).all():
    db.delete(user)
db.commit()

# Sample accounts
accounts = [
    ("alice@example.com", "alice", "Writes about Python and coffee."),
    ("bob@example.com", "bob", "Backend engineer, occasional blogger."),
    ("carol@example.com", "carol", None),
]
users = []
for email, nickname, bio in accounts:
    user = User(email=email, hashed_password=get_password_hash("password123"))
    user.profile = Profile(email=email, nickname=nickname, bio=bio, email_public=nickname == "alice")
    users.append(user)
db.add_all(users)
db.commit()

alice, bob, carol = users

# Sample posts
post_data = [
    (alice, "Getting started with FastAPI", "FastAPI makes typed HTTP APIs pleasant to write.", ["python", "fastapi"], True),
    (alice, "Notes on SQLAlchemy relationships", "Cascades, back_populates and when to use them.", ["python", "sqlalchemy"], True),
    (bob, "Why I keep a dev journal", "Writing things down makes debugging faster.", ["habits"], True),
    (bob, "Draft: rate limiting ideas", "Not ready yet.", [], False),
]
posts = [
    Post(author_id=author.id, title=title, content=content, slug=slugify(title), tags=tags, is_public=public)
    for author, title, content, tags, public in post_data
]
db.add_all(posts)
db.commit()

# Comments, one reply, and likes
first = Comment(post_id=posts[0].id, user_id=bob.id, content="Great intro! @alice do you have a follow-up planned?")
db.add(first)
db.commit()
db.add_all([
    Comment(post_id=posts[0].id, user_id=alice.id, parent_id=first.id, content="@bob yes, next week."),
    Comment(post_id=posts[2].id, user_id=carol.id, content="I should start one too."),
    Like(post_id=posts[0].id, user_id=bob.id),
    Like(post_id=posts[0].id, user_id=carol.id),
    Like(post_id=posts[2].id, user_id=alice.id),
    CommentLike(comment_id=first.id, user_id=alice.id),
])
db.commit()

print("Database seeded successfully!")
print(f"  - {len(users)} accounts (password: password123)")
print(f"  - {len(posts)} posts")
print(f"  - {db.query(Comment).count()} comments, {db.query(Like).count()} post likes")

db.close()
