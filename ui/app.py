import os, requests, streamlit as st
from pagesentiment.client import SubmissionFlow
from pagesentiment.timed_http import RequestAborted, get_data

API_BASE = os.getenv('API_BASE', 'http://localhost:3000')
ANALYZE_PATH = os.getenv('ANALYZE_PATH', '/analyze-sentiment')
PING_TIMEOUT_MS = 5_000
ABOUT = 'Evaluate a news article with NLP: paste the URL of a public page to get its sentiment.'

def _assert_api_base():
    if not (API_BASE.startswith('http://') or API_BASE.startswith('https://')):
        raise RuntimeError(f'API_BASE is invalid: {API_BASE}')

_assert_api_base()

st.set_page_config(page_title='Page Sentiment', layout='centered')
st.title('Page Sentiment')
st.caption('Enter the URL of a web page to do sentiment analysis on.')

st.session_state.setdefault('pending', False)
st.session_state.setdefault('result', None)
st.session_state.setdefault('alert', None)

# Sidebar
st.sidebar.markdown(f'**Backend:** `{API_BASE}`')

def _ping_backend():
    try:
        resp, data = get_data(f'{API_BASE}/health', timeout_ms=PING_TIMEOUT_MS)
    except RequestAborted:
        st.sidebar.warning('Backend did not answer in time.')
        return
    except requests.RequestException as e:
        st.sidebar.error(f'Backend unreachable: {e}')
        return
    if resp.status_code == 200 and isinstance(data, dict) and data.get('status') == 'ok':
        key_note = '' if data.get('api_key_configured') else ' (no API key configured)'
        st.sidebar.success(f'Backend is up{key_note}.')
    else:
        st.sidebar.error(f'Backend answered {resp.status_code}.')

if st.sidebar.button('Check backend'):
    _ping_backend()
if st.sidebar.button('About'):
    st.sidebar.info(ABOUT)

def _start_submission():
    st.session_state.pending = True
    st.session_state.alert = None

def _show_alert(message: str):
    st.session_state.alert = message

def _show_result(view):
    st.session_state.result = view

def _set_busy(busy: bool):
    st.session_state.pending = busy

with st.form('analyze', clear_on_submit=False):
    st.text_input('Page URL', placeholder='https://...', key='target_url')
    st.form_submit_button('Submit', on_click=_start_submission, disabled=st.session_state.pending)

if st.session_state.pending:
    flow = SubmissionFlow(f'{API_BASE}{ANALYZE_PATH}', alert=_show_alert, render=_show_result, set_busy=_set_busy)
    with st.spinner('Analyzing...'):
        flow.submit(st.session_state.target_url)
    st.session_state.pending = False
    st.rerun()

if st.session_state.alert:
    st.error(st.session_state.alert)

view = st.session_state.result
if view is not None:
    st.subheader('Page snippet')
    st.markdown(f'> {view.snippet}')
    st.subheader('Page features')
    st.table({'Feature': [r[0] for r in view.rows()], 'Value': [r[1] for r in view.rows()]})
