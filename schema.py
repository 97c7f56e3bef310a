"""Database objects the app expects on the Supabase Postgres side.

Run through `tools/bootstrap_schema.py`. The app itself never issues DDL; it
talks to Supabase with the anon key only.
"""

import logging
from typing import List, Optional

from sqlalchemy import create_engine, text

LOGGER = logging.getLogger("educonnect")

# Foreign key names matter: db.py embeds profiles through them.
TABLES_DDL = """
create table if not exists public.profiles (
  id uuid primary key default gen_random_uuid(),
  user_id uuid not null unique references auth.users (id) on delete cascade,
  full_name text not null default '',
  role text not null check (role in ('student', 'teacher')),
  created_at timestamptz not null default now()
);

create table if not exists public.questions (
  id uuid primary key default gen_random_uuid(),
  content text not null,
  status text not null default 'pending' check (status in ('pending', 'answered')),
  student_id uuid not null,
  teacher_id uuid not null,
  created_at timestamptz not null default now(),
  constraint questions_student_id_fkey foreign key (student_id) references public.profiles (user_id),
  constraint questions_teacher_id_fkey foreign key (teacher_id) references public.profiles (user_id)
);

create table if not exists public.answers (
  id uuid primary key default gen_random_uuid(),
  question_id uuid not null references public.questions (id) on delete cascade,
  teacher_id uuid not null,
  content text not null,
  created_at timestamptz not null default now(),
  constraint answers_teacher_id_fkey foreign key (teacher_id) references public.profiles (user_id)
);

create index if not exists idx_profiles_role on public.profiles (role);
create index if not exists idx_questions_student_created_at on public.questions (student_id, created_at desc);
create index if not exists idx_questions_teacher_created_at on public.questions (teacher_id, created_at desc);
create index if not exists idx_answers_question_created_at on public.answers (question_id, created_at);
"""

POLICIES_DDL = """
alter table public.profiles enable row level security;
alter table public.questions enable row level security;
alter table public.answers enable row level security;

drop policy if exists "profiles readable by signed-in users" on public.profiles;
create policy "profiles readable by signed-in users" on public.profiles
  for select to authenticated using (true);

drop policy if exists "students read own questions" on public.questions;
create policy "students read own questions" on public.questions
  for select to authenticated using (auth.uid() = student_id or auth.uid() = teacher_id);

drop policy if exists "students ask questions" on public.questions;
create policy "students ask questions" on public.questions
  for insert to authenticated with check (auth.uid() = student_id and status = 'pending');

drop policy if exists "teachers update addressed questions" on public.questions;
create policy "teachers update addressed questions" on public.questions
  for update to authenticated using (auth.uid() = teacher_id) with check (auth.uid() = teacher_id);

drop policy if exists "participants read answers" on public.answers;
create policy "participants read answers" on public.answers
  for select to authenticated using (
    exists (
      select 1 from public.questions q
      where q.id = question_id and (q.student_id = auth.uid() or q.teacher_id = auth.uid())
    )
  );

drop policy if exists "teachers answer addressed questions" on public.answers;
create policy "teachers answer addressed questions" on public.answers
  for insert to authenticated with check (
    auth.uid() = teacher_id
    and exists (select 1 from public.questions q where q.id = question_id and q.teacher_id = auth.uid())
  );
"""

# Dollar-quoted bodies: each of these runs as a single statement.
PROFILE_TRIGGER_FUNCTION = """
create or replace function public.handle_new_user()
returns trigger
language plpgsql
security definer set search_path = public
as $$
begin
  insert into public.profiles (user_id, full_name, role)
  values (
    new.id,
    coalesce(new.raw_user_meta_data ->> 'full_name', ''),
    coalesce(new.raw_user_meta_data ->> 'role', 'student')
  );
  return new;
end;
$$
"""

PROFILE_TRIGGER_DDL = """
drop trigger if exists on_auth_user_created on auth.users;
create trigger on_auth_user_created
  after insert on auth.users
  for each row execute function public.handle_new_user();
"""

REALTIME_PUBLICATION = """
do $$
begin
  if exists (select 1 from pg_publication where pubname = 'supabase_realtime') then
    if not exists (select 1 from pg_publication_tables
                   where pubname = 'supabase_realtime' and schemaname = 'public' and tablename = 'questions') then
      alter publication supabase_realtime add table public.questions;
    end if;
    if not exists (select 1 from pg_publication_tables
                   where pubname = 'supabase_realtime' and schemaname = 'public' and tablename = 'answers') then
      alter publication supabase_realtime add table public.answers;
    end if;
  end if;
end;
$$
"""


# ============================================================
#  ENGINE
# ============================================================
def get_db_driver_type():
    try:
        import psycopg  # noqa: F401
        return "psycopg"
    except ImportError:
        try:
            import psycopg2  # noqa: F401
            return "psycopg2"
        except ImportError:
            return None


def _normalize_db_url(db_url: str, driver: Optional[str] = None) -> str:
    u = (db_url or "").strip()
    if not u:
        return ""
    if u.startswith("postgres://"):
        u = u.replace("postgres://", "postgresql://", 1)

    if driver == "psycopg":
        if u.startswith("postgresql://") and "psycopg" not in u:
            u = u.replace("postgresql://", "postgresql+psycopg://", 1)
    elif driver == "psycopg2":
        if u.startswith("postgresql://") and "psycopg2" not in u:
            u = u.replace("postgresql://", "postgresql+psycopg2://", 1)
    return u


def get_db_engine(db_url: str):
    driver = get_db_driver_type()
    url = _normalize_db_url(db_url, driver)
    if not url or not driver:
        return None
    return create_engine(url, pool_pre_ping=True)


# ============================================================
#  SQL HELPERS
# ============================================================
def _split_sql_statements(sql_blob: str) -> List[str]:
    """
    Split SQL blob into statements at semicolons, but ignore semicolons in:
    - single-quoted strings
    - double-quoted identifiers
    Dollar-quoted bodies are not understood; run those unsplit.
    """
    s = sql_blob or ""
    out: List[str] = []
    buf: List[str] = []
    in_sq = False
    in_dq = False

    for ch in s:
        if ch == "'" and not in_dq:
            in_sq = not in_sq
        elif ch == '"' and not in_sq:
            in_dq = not in_dq
        elif ch == ";" and not in_sq and not in_dq:
            stmt = "".join(buf).strip()
            if stmt:
                out.append(stmt)
            buf = []
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        out.append(tail)
    return out


def schema_statements() -> List[str]:
    """Every statement in execution order."""
    return (
        _split_sql_statements(TABLES_DDL)
        + _split_sql_statements(POLICIES_DDL)
        + [PROFILE_TRIGGER_FUNCTION.strip()]
        + _split_sql_statements(PROFILE_TRIGGER_DDL)
        + [REALTIME_PUBLICATION.strip()]
    )


def ensure_schema(engine) -> int:
    """Apply the schema in one transaction. Returns the number of statements run."""
    statements = schema_statements()
    try:
        with engine.begin() as conn:
            for stmt in statements:
                conn.execute(text(stmt))
    except Exception as e:
        LOGGER.error("Schema bootstrap failed", extra={"ctx": {"component": "schema", "error": type(e).__name__}})
        raise
    LOGGER.info("Schema ready", extra={"ctx": {"component": "schema", "statements": len(statements)}})
    return len(statements)
