from paneldash import create_app


def main():
    app = create_app()
    with app.app_context():
        store = app.extensions["store"]

        # ---- Demo account ----
        store.ensure_user("Admin", "admin@example.com", "Admin1234")
        store.save()

        print("✅ Seed complete.")
        print("🔑 Admin login: admin@example.com / Admin1234")


if __name__ == "__main__":
    main()
