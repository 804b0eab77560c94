"""Streamlit UI for the RoleReady resume pipeline."""

import uuid
from dataclasses import asdict

import pandas as pd
import requests
import streamlit as st
from google import genai

from roleready.ats import score_resume
from roleready.config import load_settings
from roleready.github import GitHubAPIError, fetch_user_repositories, suggest_skills_from_repos
from roleready.logging_config import configure_logging
from roleready.readiness import calculate_readiness, get_skill_gaps
from roleready.resume_parser import guess_mime_type
from roleready.resume_sections import apply_sections, extract_resume_sections
from roleready.roadmap import generate_roadmap
from roleready.roles import load_roles
from roleready.skills import load_skill_catalog
from roleready.suggestions import (
    CONFIRMABLE_LEVELS,
    Resume,
    add_github_skills,
    confirm_suggestions,
    get_suggestions,
    parse_resume,
)

settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="RoleReady", layout="wide")

USER_ID = "local-user"
ROADMAP_STEPS = 10

BREAKDOWN_COLS = [
    "skill_name",
    "importance",
    "required_level",
    "user_level",
    "weight",
    "weighted_score",
    "meets_requirement",
]


@st.cache_resource
def get_catalog_and_roles():
    catalog = load_skill_catalog(settings.skills_csv)
    return catalog, load_roles(catalog, settings.benchmarks_csv)


catalog, roles = get_catalog_and_roles()
state = st.session_state
state.setdefault("resume", None)
state.setdefault("user_skills", [])
state.setdefault("github_skills", [])

# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

st.title("RoleReady")

with st.form("upload_form"):
    gemini_api_key = st.text_input(
        "Gemini API Key (optional, enables section extraction)",
        value=settings.gemini_api_key,
        type="password",
    )
    role_name = st.selectbox("Target Role", sorted(roles))
    resume_file = st.file_uploader("Upload your resume", type=["pdf", "docx"])
    submitted = st.form_submit_button("Parse Resume")

if submitted:
    if not resume_file:
        st.error("Please upload your resume.")
        st.stop()

    mime_type = guess_mime_type(resume_file.name)
    if mime_type is None:
        st.error(f"Unsupported file type: {resume_file.name}")
        st.stop()

    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}_{resume_file.name}"
    (settings.upload_dir / filename).write_bytes(resume_file.read())

    resume = Resume(
        id=uuid.uuid4().hex,
        user_id=USER_ID,
        filename=filename,
        original_name=resume_file.name,
        mime_type=mime_type,
    )
    with st.spinner("Extracting skills from your resume..."):
        try:
            outcome = parse_resume(resume, settings.upload_dir, catalog, state.user_skills)
        except (ValueError, RuntimeError, FileNotFoundError) as e:
            st.error(f"Failed to parse resume: {e}")
            st.stop()

    st.info(
        f"Found {outcome.total_skills_found} skills "
        f"({len(outcome.suggestions)} new, {outcome.already_have} already on your profile)."
    )

    if gemini_api_key.strip():
        with st.spinner("Extracting experience and education with AI..."):
            try:
                client = genai.Client(api_key=gemini_api_key.strip())
                sections = extract_resume_sections(resume.extracted_data.raw_text, client)
                apply_sections(resume.extracted_data, sections)
            except Exception as e:
                st.warning(f"Section extraction failed, scoring without it: {e}")

    state.resume = resume

resume = state.resume
if resume is None:
    st.stop()

role = roles[role_name]
benchmarks = role.active_benchmarks()

# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

st.subheader("Skill suggestions")
suggestions = get_suggestions(resume, catalog, state.user_skills)
if suggestions:
    by_name = {s.skill_name: s.skill_id for s in suggestions}
    with st.form("confirm_form"):
        accepted = st.multiselect("Skills to add", list(by_name), default=list(by_name))
        level = st.selectbox("Level", CONFIRMABLE_LEVELS, index=1)
        confirmed = st.form_submit_button("Add selected skills")
    if confirmed:
        try:
            added = confirm_suggestions(
                resume, catalog, state.user_skills, [by_name[n] for n in accepted], level
            )
        except (ValueError, LookupError) as e:
            st.error(str(e))
        else:
            st.success(f"Added {len(added)} skills from resume")
            st.rerun()
else:
    st.info("No new skill suggestions.")

# ---------------------------------------------------------------------------
# GitHub suggestions
# ---------------------------------------------------------------------------

with st.expander("Suggest skills from GitHub"):
    with st.form("github_form"):
        github_token = st.text_input("GitHub access token", type="password")
        fetched = st.form_submit_button("Fetch repositories")
    if fetched and github_token.strip():
        try:
            repos = fetch_user_repositories(github_token.strip(), api_url=settings.github_api_url)
        except (GitHubAPIError, requests.RequestException) as e:
            st.error(str(e))
        else:
            held = {s.skill_id for s in state.user_skills}
            state.github_skills = [
                s for s in suggest_skills_from_repos(repos, catalog) if s.id not in held
            ]
            st.info(f"Scanned {len(repos)} repositories.")
    if state.github_skills:
        github_by_name = {s.name: s.id for s in state.github_skills}
        with st.form("github_confirm_form"):
            github_accepted = st.multiselect(
                "Skills to add", list(github_by_name), default=list(github_by_name)
            )
            github_confirmed = st.form_submit_button("Add selected skills")
        if github_confirmed:
            added = add_github_skills(
                USER_ID, [github_by_name[n] for n in github_accepted], state.user_skills
            )
            state.github_skills = []
            st.success(f"Added {len(added)} skills from GitHub")
            st.rerun()

# ---------------------------------------------------------------------------
# Readiness
# ---------------------------------------------------------------------------

st.subheader(f"Readiness for {role.name}")
readiness = calculate_readiness(USER_ID, role.id, role.name, benchmarks, state.user_skills)
cols = st.columns(3)
cols[0].metric("Readiness", f"{readiness.percentage}%")
cols[1].metric(
    "Required skills met",
    f"{readiness.required_skills_met}/{readiness.required_skills_total}",
)
cols[2].metric("Skills matched", f"{readiness.skills_matched}/{readiness.total_benchmarks}")

breakdown_df = pd.DataFrame([asdict(b) for b in readiness.breakdown])
if not breakdown_df.empty:
    st.dataframe(breakdown_df[BREAKDOWN_COLS], use_container_width=True)

gaps = get_skill_gaps(readiness)
if gaps:
    with st.expander(f"Skill gaps ({len(gaps)})"):
        st.dataframe(pd.DataFrame([asdict(g) for g in gaps]), use_container_width=True)

# ---------------------------------------------------------------------------
# Roadmap
# ---------------------------------------------------------------------------

roadmap = generate_roadmap(USER_ID, role.id, role.name, readiness, max_steps=ROADMAP_STEPS)
if roadmap.steps:
    st.subheader(roadmap.title)
    st.caption(roadmap.description)
    st.metric("Estimated effort", f"{roadmap.total_estimated_hours} hours")
    for i, step in enumerate(roadmap.steps, 1):
        step_label = step.step_type.replace("_", " ")
        with st.expander(f"{i}. {step.skill_name} ({step_label})"):
            st.write(step.action_description)
            st.write(
                f"{step.current_level} -> {step.target_level}, "
                f"about {step.estimated_hours} hours"
            )
            for resource in step.suggested_resources:
                st.write(f"- {resource}")

# ---------------------------------------------------------------------------
# ATS score
# ---------------------------------------------------------------------------

st.subheader("ATS compatibility")
try:
    ats = score_resume(resume, benchmarks)
except ValueError as e:
    st.warning(str(e))
else:
    st.metric("Overall ATS score", ats.overall_score)
    st.dataframe(
        pd.DataFrame([asdict(ats.breakdown)]), use_container_width=True, hide_index=True
    )
    if ats.missing_keywords:
        st.write("Missing keywords: " + ", ".join(ats.missing_keywords))
    for suggestion in ats.suggestions:
        st.write(f"- {suggestion}")
