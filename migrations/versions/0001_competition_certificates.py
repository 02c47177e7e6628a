"""users, athletes, competitions, categories, registrations and certificates"""

from alembic import op
import sqlalchemy as sa

revision = "0001_competition_certificates"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("full_name", sa.String(255)),
            sa.Column("is_admin", sa.Boolean, server_default=sa.false()),
            sa.Column("is_event_organizer", sa.Boolean, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        )
        op.create_index(
            "ix_users_email_lower",
            "users",
            [sa.text("lower(email)")],
            unique=True,
        )

    if not inspector.has_table("athletes"):
        op.create_table(
            "athletes",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column(
                "user_id",
                sa.Integer,
                sa.ForeignKey("users.id", ondelete="SET NULL"),
            ),
            sa.Column("full_name", sa.String(255)),
            sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        )

    if not inspector.has_table("competitions"):
        op.create_table(
            "competitions",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("location", sa.String(255)),
            sa.Column("city", sa.String(120)),
            sa.Column("start_date", sa.Date),
            sa.Column("end_date", sa.Date),
        )

    if not inspector.has_table("competition_categories"):
        op.create_table(
            "competition_categories",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column(
                "competition_id",
                sa.Integer,
                sa.ForeignKey("competitions.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("category_label", sa.String(255)),
            sa.Column("age_class", sa.String(64)),
            sa.Column("division", sa.String(64)),
            sa.Column("gender", sa.String(16)),
        )

    if not inspector.has_table("competition_registrations"):
        op.create_table(
            "competition_registrations",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column(
                "competition_id",
                sa.Integer,
                sa.ForeignKey("competitions.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "category_id",
                sa.Integer,
                sa.ForeignKey("competition_categories.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "athlete_id",
                sa.Integer,
                sa.ForeignKey("athletes.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("qualification_score", sa.Float),
            sa.Column("rank", sa.Integer),
            sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        )
        op.create_index(
            "ix_competition_registrations_competition_id",
            "competition_registrations",
            ["competition_id"],
        )

    if not inspector.has_table("certificates"):
        op.create_table(
            "certificates",
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column(
                "competition_id",
                sa.Integer,
                sa.ForeignKey("competitions.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "recipient_id",
                sa.Integer,
                sa.ForeignKey("athletes.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("recipient_name", sa.String(255), nullable=False),
            sa.Column("category", sa.String(255), nullable=False),
            sa.Column("achievement", sa.String(64), nullable=False),
            sa.Column("rank", sa.Integer),
            sa.Column("total_score", sa.Float),
            sa.Column("validation_code", sa.String(32), nullable=False),
            sa.Column("validation_url", sa.String(512), nullable=False),
            sa.Column(
                "template_type",
                sa.String(16),
                nullable=False,
                server_default="DEFAULT",
            ),
            sa.Column(
                "download_count", sa.Integer, nullable=False, server_default="0"
            ),
            sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint(
                "competition_id",
                "recipient_id",
                name="uix_certificate_competition_recipient",
            ),
            sa.UniqueConstraint(
                "validation_code", name="uix_certificates_validation_code"
            ),
        )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS certificates")
    op.execute("DROP TABLE IF EXISTS competition_registrations")
    op.execute("DROP TABLE IF EXISTS competition_categories")
    op.execute("DROP TABLE IF EXISTS competitions")
    op.execute("DROP TABLE IF EXISTS athletes")
    op.execute("DROP TABLE IF EXISTS users")
