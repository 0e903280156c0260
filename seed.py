from socialdesk.database import SessionLocal, engine, Base
from socialdesk.models import Tenant, Brand, Website, Post, Approval, PostSchedule, ScheduleInstance, SchedulingHistory
from socialdesk.auth import create_access_token
from socialdesk.scheduling import service, state_machine

# Create tables
Base.metadata.create_all(bind=engine)

db = SessionLocal()

# Clear existing data
db.query(SchedulingHistory).delete()
db.query(ScheduleInstance).delete()
db.query(PostSchedule).delete()
db.query(Approval).delete()
db.query(Post).delete()
db.query(Website).delete()
db.query(Brand).delete()
db.query(Tenant).delete()

tenant = Tenant(subdomain="demo", name="Demo Agency", email="ops@demo.test", is_active=True)
db.add(tenant)
db.flush()

brands = [
    Brand(tenant_id=tenant.id, slug="north-coffee", name="North Coffee", oneup_category_id=1001),
    Brand(tenant_id=tenant.id, slug="harbor-bakery", name="Harbor Bakery"),
]
db.add_all(brands)
db.add(Website(tenant_id=tenant.id, name="North Coffee Blog", domain="blog.northcoffee.test"))
db.flush()

# (title, caption, stage) where stage is pending, text, or approved
posts = [
    ("Spring roast launch", "Our spring roast is here. Bright, floral and limited.", "approved"),
    ("Latte art Friday", "Show us your best pour. Tag us to be featured!", "approved"),
    ("Barista tips", "Three tips for a better home espresso.", "text"),
    ("Weekend hours", "We're open 7am to 4pm this weekend.", "pending"),
]

created = []
for brand in brands:
    for title, caption, stage in posts:
        post = service.create_post(db, brand, title=title, content=caption, approve_text=stage != "pending")
        if stage == "approved":
            state_machine.decide_image(post.approval, "approved")
        created.append(post)

# One approved post per brand also gets a platform duplicate sharing its title
for brand in brands:
    twin = service.create_post(db, brand, title="Spring roast launch",
                               content="Our spring roast is here. Link in bio.", approve_text=True)
    twin.platform = "instagram"
    twin.is_duplicate = True
    state_machine.decide_image(twin.approval, "approved")
    created.append(twin)

db.commit()

print("Database seeded successfully!")
print(f"  - Tenant '{tenant.subdomain}' (id {tenant.id})")
print(f"  - {len(brands)} brands")
print(f"  - {len(created)} posts")
print(f"  - Token: {create_access_token({'sub': tenant.id})}")

db.close()
