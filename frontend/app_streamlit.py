import streamlit as st
import requests
import pandas as pd
import json
import os
import time
from datetime import date

# Configuration
BACKEND_URL = os.getenv("BACKEND_API_URL", "http://localhost:8000") # Use environment variable or default
SENTENCES_ENDPOINT = f"{BACKEND_URL}/sentences/"
RANDOM_SENTENCE_ENDPOINT = f"{BACKEND_URL}/sentences/random/"
ATTEMPTS_ENDPOINT = f"{BACKEND_URL}/attempts/"
PRONOUNCE_ENDPOINT = f"{BACKEND_URL}/pronounce/"
PROFILE_ENDPOINT = f"{BACKEND_URL}/profile/"
STATS_ENDPOINT = f"{BACKEND_URL}/stats/"
EXPORT_ENDPOINT = f"{BACKEND_URL}/export/"
IMPORT_ENDPOINT = f"{BACKEND_URL}/import/"
HISTORY_ENDPOINT = f"{BACKEND_URL}/history/"

CORRECTION_LABELS = {
    "particle": "🧩 Particle",
    "spacing": "␣ Spacing",
    "spelling": "✏️ Spelling",
    "missing": "➖ Missing",
    "extra": "➕ Extra",
}

st.set_page_config(layout="wide", page_title="Korean Typing Barista")

# --- Session State Initialization ---
for key, default in {
    "sentence": None,
    "started_at": None,
    "attempt_result": None,
    "round": 0,
}.items():
    if key not in st.session_state:
        st.session_state[key] = default


def _error_detail(response) -> str:
    try:
        return response.json().get("detail", response.text)
    except ValueError: # If response is not JSON
        return response.text


def _api(method: str, url: str, **kwargs):
    """Calls the backend and turns failures into a message shown with st.error. Returns None on failure."""
    response = None
    try:
        response = requests.request(method, url, timeout=kwargs.pop("timeout", 30), **kwargs)
        response.raise_for_status() # Will raise an HTTPError for bad responses (4XX or 5XX)
        return response
    except requests.exceptions.HTTPError:
        st.error(f"Request failed (HTTP {response.status_code}): {_error_detail(response)}")
    except requests.exceptions.RequestException as req_err:
        st.error(f"Could not connect to the backend or network error. ({req_err})")
    return None


def order_sentence(genre: str, difficulty: str):
    response = _api("GET", RANDOM_SENTENCE_ENDPOINT, params={"genre": genre, "difficulty": difficulty})
    if response is not None:
        st.session_state.sentence = response.json()
        st.session_state.started_at = time.time()
        st.session_state.attempt_result = None
        st.session_state["round"] += 1


def typing_page():
    st.title("☕️ Typing Barista")
    st.markdown("Pick your beans and sugar level, then type the Korean sentence as accurately and quickly as you can.")

    menu_response = _api("GET", SENTENCES_ENDPOINT)
    if menu_response is None:
        return
    menu = menu_response.json()
    genre_names = {g["id"]: g["name"] for g in menu["genres"]}
    difficulty_names = {d["id"]: d["name"] for d in menu["difficulties"]}

    col_genre, col_difficulty = st.columns(2)
    genre = col_genre.selectbox("Coffee beans (genre)", list(genre_names), format_func=genre_names.get)
    difficulty = col_difficulty.selectbox("Sugar level (difficulty)", list(difficulty_names),
                                          format_func=difficulty_names.get)

    if st.button("Order", type="primary", key="order_btn"):
        order_sentence(genre, difficulty)

    sentence_data = st.session_state.sentence
    if not sentence_data:
        st.info("Place an order to get your practice sentence.")
        return

    sentence = sentence_data["sentence"]
    st.divider()
    st.subheader(sentence["kr"])
    st.caption(f"{sentence.get('en', '')}  ·  {sentence.get('cn', '')}")

    if st.button("🔊 Listen", key="listen_btn"):
        with st.spinner("Brewing audio..."):
            audio_response = _api("GET", PRONOUNCE_ENDPOINT, params={"text": sentence["kr"]}, timeout=60)
            if audio_response is not None:
                st.audio(audio_response.content, format="audio/mpeg")

    with st.form(key=f"typing_form_{st.session_state['round']}"):
        typed = st.text_input("Your input", placeholder="여기에 입력하세요")
        submitted = st.form_submit_button("Serve")

    if submitted:
        if not typed:
            st.warning("Type the sentence before serving it.")
        else:
            elapsed = time.time() - (st.session_state.started_at or time.time())
            payload = {
                "input": typed,
                "target": sentence["kr"],
                "elapsed_seconds": elapsed,
                "genre": sentence_data["genre"],
                "difficulty": sentence_data["difficulty"],
            }
            with st.spinner("The barista is tasting your sentence... 🧠"):
                response = _api("POST", ATTEMPTS_ENDPOINT, json=payload)
            if response is not None:
                st.session_state.attempt_result = response.json()

    result = st.session_state.attempt_result
    if result:
        show_receipt(result)


def show_receipt(result: dict):
    analysis = result["analysis"]
    summary = result["summary"]

    st.divider()
    st.subheader("🧾 Receipt")
    cols = st.columns(4)
    cols[0].metric("Barista score", analysis["score"])
    cols[1].metric("WPM", summary["wpm"])
    cols[2].metric("Accuracy", f"{summary['accuracy']}%")
    cols[3].metric("Points", f"+{summary['points_earned']}", help=f"Level {summary['level']}")

    if analysis["score"] >= 90:
        st.balloons()
    st.success(analysis["feedback"])

    if not analysis["corrections"]:
        st.info("No corrections. Perfect cup!")
        return

    rows = [
        {
            "Type": CORRECTION_LABELS.get(c["type"], c["type"]),
            "Position": c["position"],
            "Expected": c["expected"],
            "You typed": c["actual"],
            "Explanation": c["explanation"],
        }
        for c in analysis["corrections"]
    ]
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)


def profile_page():
    st.title("👤 Profile")

    profile_response = _api("GET", PROFILE_ENDPOINT)
    stats_response = _api("GET", STATS_ENDPOINT)
    if profile_response is None or stats_response is None:
        return
    state = profile_response.json()
    stats = stats_response.json()
    profile = state["profile"]

    st.markdown(f"## {profile['avatar']} {profile['username']}")
    st.caption(profile["bio"])

    cols = st.columns(5)
    cols[0].metric("Level", state["level"])
    cols[1].metric("Points", state["points"])
    cols[2].metric("Sentences", stats["total_sentences"])
    cols[3].metric("Hours", stats["total_hours"])
    cols[4].metric("Streak (days)", stats["streak"])

    if stats["chart"]:
        st.subheader("📈 Recent sessions")
        chart_df = pd.DataFrame(stats["chart"]).set_index("name")[["wpm", "accuracy"]]
        st.line_chart(chart_df)

    if stats["mistake_types"]:
        st.subheader("⚠️ Mistakes by type")
        st.bar_chart(pd.Series(stats["mistake_types"], name="count"))

    with st.expander("✏️ Edit profile"):
        with st.form(key="profile_form"):
            username = st.text_input("Name", value=profile["username"])
            avatar = st.text_input("Avatar", value=profile["avatar"])
            bio = st.text_area("Bio", value=profile["bio"])
            if st.form_submit_button("Save"):
                if _api("PATCH", PROFILE_ENDPOINT, json={"username": username, "avatar": avatar, "bio": bio}) is not None:
                    st.success("Profile saved.")

    with st.expander("💾 Backup"):
        export_response = _api("GET", EXPORT_ENDPOINT)
        if export_response is not None:
            st.download_button(
                "Download progress (JSON)",
                data=json.dumps(export_response.json(), ensure_ascii=False, indent=2),
                file_name=f"korean-learning-backup-{date.today():%Y%m%d}.json",
                mime="application/json",
            )
        uploaded = st.file_uploader("Restore progress from JSON", type=["json"])
        if uploaded is not None and st.button("Import", key="import_btn"):
            try:
                document = json.loads(uploaded.getvalue().decode("utf-8"))
            except ValueError:
                st.error("Could not parse the file.")
            else:
                if _api("POST", IMPORT_ENDPOINT, json=document) is not None:
                    st.success("Import complete.")

        if st.button("🗑️ Clear history", key="clear_btn"):
            if _api("DELETE", HISTORY_ENDPOINT) is not None:
                st.success("History cleared.")


page = st.sidebar.radio("Menu", ["Typing", "Profile"])
if page == "Typing":
    typing_page()
else:
    profile_page()

st.sidebar.markdown("---")
st.sidebar.info("The AI barista checks particles, spacing and spelling in every sentence you serve.")
