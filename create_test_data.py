#!/usr/bin/env python3

import asyncio
import sys
import os

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from app.database import create_tables, AsyncSessionLocal
from app.repositories.user_repository import UserRepository
from app.repositories.post_repository import PostRepository
from app.repositories.message_repository import MessageRepository

async def create_test_users():
    async with AsyncSessionLocal() as db:
        user_repo = UserRepository(db)

        users_data = [
            {"username": "alice", "email": "alice@example.com", "password": "password123", "role": "admin"},
            {"username": "bob", "email": "bob@example.com", "password": "password123", "role": "member"},
            {"username": "charlie", "email": "charlie@example.com", "password": "password123", "role": "member"},
        ]

        created_users = []
        for user_data in users_data:
            existing_user = await user_repo.get_by_email(user_data["email"])
            if not existing_user:
                user = await user_repo.create(**user_data)
                created_users.append(user)
                print(f"Created user: {user.username} (ID: {user.id})")
            else:
                created_users.append(existing_user)
                print(f"User {user_data['username']} exists (ID: {existing_user.id})")

        return created_users

async def create_test_posts(users):
    async with AsyncSessionLocal() as db:
        post_repo = PostRepository(db)

        posts_data = [
            (users[0], "Welcome to the feed!"),
            (users[1], "First post from Bob"),
            (users[2], "Hello everyone"),
        ]

        created_posts = []
        for author, content in posts_data:
            post = await post_repo.create(author.id, content)
            created_posts.append(post)
            print(f"Created post from {author.username}: '{content}'")

        return created_posts

async def create_test_messages(users):
    async with AsyncSessionLocal() as db:
        message_repo = MessageRepository(db)

        messages_data = [
            (users[0], users[1], "Hey Bob! How's it going?"),
            (users[1], users[0], "Hi Alice! All good, thanks!"),
            (users[2], users[0], "Alice, can we talk about the project?"),
        ]

        created_messages = []
        for sender, receiver, content in messages_data:
            message = await message_repo.create(sender.id, receiver.id, content)
            created_messages.append(message)
            print(f"Created message from {sender.username} to {receiver.username}: '{content[:30]}'")

        return created_messages

async def main():
    print("Creating test data...\n")

    try:
        print("1. Creating database tables...")
        await create_tables()
        print("Tables created\n")

        print("2. Creating test users...")
        users = await create_test_users()
        print(f"Created/found {len(users)} users\n")

        print("3. Creating test posts...")
        posts = await create_test_posts(users)
        print(f"Created {len(posts)} posts\n")

        print("4. Creating test messages...")
        messages = await create_test_messages(users)
        print(f"Created {len(messages)} messages\n")

        print("Test data created successfully!")
        print("\nUsers:")
        for user in users:
            print(f"  - {user.username} <{user.email}> (ID: {user.id}, role: {user.role}) - password: password123")

        print("\nUseful links:")
        print("  - API docs: http://localhost:8000/docs")
        print("  - WebSocket: ws://localhost:8000/ws")

    except Exception as e:
        print(f"Error creating test data: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

if __name__ == "__main__":
    asyncio.run(main())
