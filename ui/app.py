# ui/app.py

import streamlit as st
import requests
import os
import html
from datetime import datetime
from dotenv import load_dotenv

# Load environment variables
load_dotenv()
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:3000")

CATEGORIES = {
    "node_summary": "Summarize a node",
    "edge_summary": "Summarize an edge",
    "custom_question": "Ask a custom question",
}

st.set_page_config(page_title="BioMedGPS AI", layout="centered")

# --- CSS Styling ---
st.markdown("""
    <style>
        .title-bar {
            font-size: 1.6rem;
            font-weight: bold;
            text-align: center;
            padding: 10px;
            border-bottom: 1px solid #DDD;
            margin-bottom: 20px;
        }
        .prompt-box, .answer-box {
            padding: 12px 18px;
            border-radius: 12px;
            margin: 8px 0;
            white-space: pre-wrap;
            color: black;
        }
        .prompt-box {
            background-color: #F1F0F0;
        }
        .answer-box {
            background-color: #E3F2FD;
        }
    </style>
""", unsafe_allow_html=True)

st.markdown('<div class="title-bar">🧬 BioMedGPS - Knowledge Graph Assistant</div>', unsafe_allow_html=True)

# --- Initialize Session State ---
if "last_message" not in st.session_state:
    st.session_state.last_message = None


def entity_form(prefix: str, title: str) -> dict:
    st.markdown(f"**{title}**")
    col1, col2 = st.columns(2)
    with col1:
        entity_id = st.text_input("ID", key=f"{prefix}_id", placeholder="DrugBank:DB01050")
        label = st.text_input("Type", key=f"{prefix}_label", placeholder="Compound")
    with col2:
        name = st.text_input("Name", key=f"{prefix}_name", placeholder="IBUPROFEN")
        resource = st.text_input("Resource", key=f"{prefix}_resource", placeholder="DrugBank")
    return {"id": entity_id, "name": name, "label": label, "resource": resource or "BioMedGPS"}


def build_context(category: str) -> dict:
    if category == "node_summary":
        return entity_form("node", "Node")

    if category == "edge_summary":
        source = entity_form("source", "Source")
        target = entity_form("target", "Target")
        relation_type = st.text_input("Relation type", placeholder="DRUGBANK::treats::Compound:Disease")
        return {
            "source": source,
            "target": target,
            "relation": {
                "relation_type": relation_type,
                "source_id": source["id"],
                "source_type": source["label"],
                "target_id": target["id"],
                "target_type": target["label"],
                "resource": source["resource"],
            },
        }

    return {"custom_question": st.text_area("Question", placeholder="What is the mechanism of action of ibuprofen?")}


# --- Question Form ---
category = st.selectbox("What do you want to know?", list(CATEGORIES), format_func=CATEGORIES.get)

with st.form("llm_message"):
    context = build_context(category)
    persist = st.checkbox("Save the answer", value=True)
    submitted = st.form_submit_button("Ask")

if submitted:
    with st.spinner("Thinking..."):
        try:
            response = requests.post(
                f"{BACKEND_URL}/api/v1/llm-messages",
                params={"persist": str(persist).lower()},
                json={"prompt_template_category": category, "context": context},
                timeout=120,
            )
            if response.status_code == 201:
                st.session_state.last_message = response.json()
            else:
                error_msg = response.json().get("detail", "Sorry, something went wrong on the server.")
                st.error(f"⚠️ {error_msg}")
        except requests.exceptions.RequestException as e:
            st.error(f"⚠️ Error reaching backend: {str(e)}")

# --- Last Answer ---
msg = st.session_state.last_message
if msg:
    st.caption(f"Session {msg['session_uuid']}")
    st.markdown(f'<div class="prompt-box">{html.escape(msg["prompt"])}</div>', unsafe_allow_html=True)
    st.markdown(f'<div class="answer-box">{html.escape(msg["message"])}</div>', unsafe_allow_html=True)

# --- Recent Messages ---
with st.sidebar:
    st.header("Recent answers")
    try:
        history = requests.get(f"{BACKEND_URL}/api/v1/llm-messages", params={"page_size": 20}, timeout=10)
        if history.status_code == 200:
            for record in history.json().get("records", []):
                created = datetime.fromtimestamp(record["created_at"]).strftime("%Y-%m-%d %H:%M")
                with st.expander(f"{created} · {record['prompt_template_category']}"):
                    st.write(record["message"] or "_No answer yet_")
    except requests.exceptions.RequestException as e:
        st.warning(f"Could not load recent answers: {e}")
