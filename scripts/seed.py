"""Database seeder for blog API benchmark testing."""
import argparse
import asyncio
import random
import time
from datetime import timedelta

from sqlalchemy import select

from app.database import Base, async_session, engine
from app.models import Article, ArticleFavorite, Comment, FollowRelation, Tag, User, utcnow

TAGS = ["python", "fastapi", "postgresql", "redis", "docker", "kubernetes",
        "react", "typescript", "aws", "devops", "testing", "performance",
        "security", "microservices", "graphql", "rest-api"]


async def seed(small: bool = False):
    num_users = 10 if small else 50
    num_articles = 100 if small else 10000
    num_comments_per_article = 2 if small else 5
    follows_per_user = 3 if small else 10
    favorites_per_article = 3 if small else 8

    print(f"Seeding: {num_users} users, {num_articles} articles, ~{num_articles * num_comments_per_article} comments")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        tags = [Tag(name=name) for name in TAGS]
        session.add_all(tags)
        await session.flush()
        print(f"  Created {len(tags)} tags")

        users = []
        for i in range(num_users):
            user = User(
                username=f"user_{i:04d}",
                email=f"user_{i:04d}@example.com",
                bio=f"I am test user number {i}. I write about technology.",
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        follow_count = 0
        for user in users:
            others = [u for u in users if u.id != user.id]
            for target in random.sample(others, k=min(follows_per_user, len(others))):
                session.add(FollowRelation(user_id=user.id, follow_id=target.id))
                follow_count += 1
        await session.flush()
        print(f"  Created {follow_count} follows")

        # One article per second going back from now, plus jitter, so
        # cursor keys are distinct at millisecond resolution.
        now = utcnow()
        batch_size = 500
        total_comments = 0
        total_favorites = 0
        for batch_start in range(0, num_articles, batch_size):
            batch_end = min(batch_start + batch_size, num_articles)
            batch = []
            for i in range(batch_start, batch_end):
                topic = random.choice(TAGS)
                created = now - timedelta(seconds=num_articles - i, milliseconds=random.randint(0, 999))
                article = Article(
                    title=f"Article {i}: How to optimize {topic} applications",
                    slug=f"article-{i}-optimize-{topic}",
                    description=f"A guide to optimizing {topic} applications for production.",
                    body=f"This is the full content of article {i}. " * 20,
                    created_at=created,
                    updated_at=created,
                    user_id=random.choice(users).id,
                )
                article.tags.extend(random.sample(tags, k=random.randint(1, 4)))
                session.add(article)
                batch.append(article)
            await session.flush()

            for article in batch:
                for n in range(random.randint(1, num_comments_per_article)):
                    commented = article.created_at + timedelta(minutes=n + 1)
                    session.add(Comment(
                        body=f"Great article! Very helpful for understanding the topic. Comment {n}.",
                        article_id=article.id,
                        user_id=random.choice(users).id,
                        created_at=commented,
                        updated_at=commented,
                    ))
                    total_comments += 1
                for fan in random.sample(users, k=random.randint(0, min(favorites_per_article, len(users)))):
                    session.add(ArticleFavorite(article_id=article.id, user_id=fan.id))
                    total_favorites += 1
            await session.flush()

            print(f"  Batch {batch_start}-{batch_end}: articles created")

        await session.commit()

        first_id = (await session.execute(select(User.id).order_by(User.id).limit(1))).scalar_one()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users} (benchmark viewer id: {first_id})")
    print(f"  Follows: {follow_count}")
    print(f"  Articles: {num_articles}")
    print(f"  Comments: ~{total_comments}")
    print(f"  Favorites: {total_favorites}")
    print(f"  Tags: {len(TAGS)}")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (100 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
