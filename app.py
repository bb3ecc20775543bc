"""
0DTE Options Explorer - Streamlit Application
Find volatile days and intraday move patterns, then follow a synthetic
same-day option across the days up to its expiry.
"""
import logging
from datetime import date, timedelta

import pandas as pd
import streamlit as st

# Page config must be first Streamlit command
st.set_page_config(
    page_title="0DTE Options Explorer",
    page_icon="⚡",
    layout="wide",
    initial_sidebar_state="expanded"
)

from config import (
    DEFAULT_MAX_HOLD_MINUTES,
    DEFAULT_MIN_MOVE_AMOUNT,
    DEFAULT_MIN_MOVE_PERCENT,
    DEFAULT_MIN_STOCK_MOVE,
    DEFAULT_MIN_VOLUME,
    DEFAULT_MOVE_RANGE,
    DEFAULT_SCAN_DAYS,
    LOG_LEVEL,
    LOGS_DIR,
    MAX_CONTRACTS,
    MOVE_RANGE_PRESETS,
    TICKERS,
)
from errors import InvalidParameterError, MarketDataError, NoDataError
from expiry_calendar import ExpiryCalendar
from explorer_state import (
    ExplorerState,
    jump_to_date,
    navigate_day,
    select_option,
    select_volatile_day,
    set_mode,
)
from market_data import MarketDataService
from market_data.config import POLYGON_API_KEY
from option_pricing import build_option_series, build_stock_series, build_strike_ladder, series_to_frame
from scanners import (
    DailyMoveScanner,
    IntradayPatternScanner,
    MinimumMoveFilter,
    PatternScanParams,
    PercentRangeFilter,
)
from session_filter import session_date, to_market_time
from trade_economics import TradeEconomics, clamp_contracts, patterns_to_frame, summarize_patterns

LOGS_DIR.mkdir(exist_ok=True)
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOGS_DIR / 'explorer.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


# ============================================================
# FORMATTING HELPERS
# ============================================================
def format_currency(value, decimals=2):
    """Format a dollar amount; negatives as -$x.xx."""
    if value is None or pd.isna(value):
        return "$0.00"
    value = float(value)
    formatted = f"${abs(value):,.{decimals}f}"
    return f"-{formatted}" if value < 0 else formatted


def format_percent(value, decimals=2):
    if value is None or pd.isna(value):
        return "0%"
    return f"{float(value):,.{decimals}f}%"


# ============================================================
# SESSION STATE
# ============================================================
def _init_state():
    st.session_state.setdefault('explorer', ExplorerState())
    st.session_state.setdefault('volatile_days', [])
    st.session_state.setdefault('patterns', [])
    st.session_state.setdefault('contracts', 1)
    # Credential lives only in this browser session
    st.session_state.setdefault('api_key', POLYGON_API_KEY)


def _state() -> ExplorerState:
    return st.session_state['explorer']


def _set_state(state: ExplorerState):
    st.session_state['explorer'] = state


@st.cache_resource(show_spinner=False)
def get_market_data(api_key: str) -> MarketDataService:
    return MarketDataService(api_key=api_key or None)


# ============================================================
# SCANNER VIEW
# ============================================================
def render_scanner(ticker: str, service: MarketDataService):
    st.subheader("📊 Find Movement Days")
    st.caption(
        f"Days where {ticker or 'the stock'} moved from open to close - "
        "even small 0.10% moves can pay for 0DTE options"
    )

    col_start, col_end = st.columns(2)
    start = col_start.date_input("From", value=date.today() - timedelta(days=DEFAULT_SCAN_DAYS))
    end = col_end.date_input("To", value=date.today())

    col_mode, col_filter, col_dir = st.columns(3)
    mode = col_mode.radio("Filter mode", ["Move range", "Minimum move"], horizontal=True)
    try:
        if mode == "Move range":
            presets = list(MOVE_RANGE_PRESETS)
            choice = col_filter.selectbox(
                "Move range",
                presets,
                index=presets.index(DEFAULT_MOVE_RANGE),
                format_func=MOVE_RANGE_PRESETS.get,
            )
            move_filter = PercentRangeFilter.from_string(choice)
        else:
            min_pct = col_filter.number_input("Min % move", min_value=0.0, value=DEFAULT_MIN_MOVE_PERCENT, step=0.1)
            min_amt = col_filter.number_input("Min $ move", min_value=0.0, value=DEFAULT_MIN_MOVE_AMOUNT, step=0.5)
            move_filter = MinimumMoveFilter(min_pct, min_amt)
    except InvalidParameterError as e:
        st.error(str(e))
        return
    direction = col_dir.selectbox("Direction", ["BOTH", "UP", "DOWN"])

    if st.button("🔍 Scan", type="primary", disabled=not ticker):
        try:
            with st.spinner("Scanning daily bars..."):
                bars = service.get_daily_bars(ticker, start, end)
            st.session_state['volatile_days'] = DailyMoveScanner.scan(bars, move_filter, direction)
        except (MarketDataError, InvalidParameterError) as e:
            st.error(f"❌ {e}")
            st.session_state['volatile_days'] = []

    days = st.session_state['volatile_days']
    if not days:
        st.info("No days found yet - adjust the filters and scan.")
        return

    table = pd.DataFrame([
        {
            "Date": d.date,
            "Direction": d.direction,
            "Move %": round(d.move_percent, 2),
            "Move $": round(d.move_amount, 2),
            "Open": d.open_price,
            "Close": d.close_price,
            "Volume": int(d.volume),
        }
        for d in days
    ])
    st.dataframe(table, use_container_width=True, hide_index=True)

    picked = st.selectbox(
        "Analyze day",
        range(len(days)),
        format_func=lambda i: f"{days[i].date} {days[i].direction} {days[i].move_percent:.2f}%",
    )
    if st.button("📊 Analyze this day"):
        _set_state(select_volatile_day(_state(), days[picked]))
        st.session_state['next_view'] = "Analyze Day"
        st.rerun()


# ============================================================
# DAY ANALYSIS VIEW
# ============================================================
def render_day_analysis(ticker: str, service: MarketDataService):
    state = _state()
    if state.volatile_day is None or not ticker:
        st.info("Pick a ticker and a day from the scanner first.")
        return

    selection = state.selection
    title = f"{ticker} {selection.label}" if selection else f"{ticker} Stock Chart"
    st.subheader(title)

    header = [f"📅 Viewing: {state.view_date}"]
    if selection:
        dte = ExpiryCalendar.days_to_expiry(state.view_date, selection.expiry_date)
        header.append(f"🎯 Expires: {selection.expiry_date}")
        header.append("🔥 0DTE (EXPIRES TODAY)" if dte == 0 else f"📅 {dte} days to expiry")
    st.caption(" • ".join(header))

    col_stock, col_option = st.columns(2)
    if col_stock.button("📈 Stock Price", disabled=state.mode == "STOCK"):
        _set_state(set_mode(state, "STOCK"))
        st.rerun()
    if col_option.button("🔶 Option Price", disabled=selection is None or state.mode == "OPTION"):
        _set_state(set_mode(state, "OPTION"))
        st.rerun()

    if selection:
        _render_navigation(state)

    try:
        bars = service.get_session_bars(ticker, state.view_date)
    except NoDataError:
        bars = []
    except MarketDataError as e:
        st.error(f"❌ {e}")
        bars = []

    if not bars:
        st.warning("No data available")
    else:
        if state.mode == "OPTION" and selection:
            points = build_option_series(bars, selection, state.view_date)
        else:
            points = build_stock_series(bars)
        frame = series_to_frame(points)
        st.line_chart(frame["price"])
        if selection:
            _render_trade_estimate(selection, bars, state.view_date)

    _render_strike_ladder(state)


def _render_navigation(state: ExplorerState):
    selection = state.selection
    col_prev, col_date, col_next = st.columns([1, 2, 1])
    transition = None
    if col_prev.button("⬅️ Previous Day"):
        transition = navigate_day(state, -1)
    picked = col_date.date_input(
        "View date", value=state.view_date, key=f"view_date_{state.view_date}"
    )
    if picked != state.view_date and transition is None:
        transition = jump_to_date(state, picked)
    if col_next.button("Next Day ➡️"):
        transition = navigate_day(state, 1)

    st.caption(f"⚠️ Can only view days before/on expiry date ({selection.expiry_date})")
    if transition is None:
        return
    if transition.accepted:
        _set_state(transition.state)
        st.rerun()
    else:
        st.warning(f"❌ {transition.warning}")


def _render_trade_estimate(selection, bars, view_date):
    contracts = clamp_contracts(st.session_state['contracts'])
    trade = TradeEconomics.from_selection(selection, bars[0], bars[-1], contracts, view_date)
    st.markdown("**Held from the open to the close of this session**")
    cols = st.columns(4)
    cols[0].metric("Entry", format_currency(trade.entry_option_price))
    cols[1].metric("Exit", format_currency(trade.exit_option_price))
    cols[2].metric("Total cost", format_currency(trade.total_cost))
    cols[3].metric("Total P/L", format_currency(trade.total_profit), format_percent(trade.percent_gain))


def _render_strike_ladder(state: ExplorerState):
    day = state.volatile_day
    st.divider()
    st.markdown(f"**🎯 Options for {day.date}** (open {format_currency(day.open_price)})")
    st.session_state['contracts'] = st.number_input(
        "Contracts", min_value=1, max_value=MAX_CONTRACTS, value=st.session_state['contracts']
    )
    contracts = clamp_contracts(st.session_state['contracts'])

    for quote in build_strike_ladder(day):
        cols = st.columns([1, 2, 2])
        badge = " 🎯" if quote.is_atm else ""
        cols[0].markdown(f"**${quote.strike}** {quote.moneyness}{badge}")
        for col, option_type, entry, target, profit in (
            (cols[1], "CALL", quote.call_entry, quote.call_target, quote.call_profit),
            (cols[2], "PUT", quote.put_entry, quote.put_target, quote.put_profit),
        ):
            label = (
                f"{option_type} Entry {format_currency(entry)} • Target {format_currency(target)}"
                f" • {format_currency(profit * contracts, 0)}"
            )
            if col.button(label, key=f"{option_type}_{quote.strike}"):
                _set_state(select_option(state, quote.strike, option_type, day.date))
                st.rerun()


# ============================================================
# INTRADAY PATTERN VIEW
# ============================================================
def render_patterns(ticker: str, service: MarketDataService):
    st.subheader("⚡ Intraday Patterns")

    col_start, col_end = st.columns(2)
    start = col_start.date_input("Start", value=date.today() - timedelta(days=7), key="pattern_start")
    end = col_end.date_input("End", value=date.today(), key="pattern_end")

    cols = st.columns(4)
    min_move = cols[0].selectbox("Min stock move", [0.05, 0.10, 0.20, 0.50],
                                 index=[0.05, 0.10, 0.20, 0.50].index(DEFAULT_MIN_STOCK_MOVE),
                                 format_func=lambda v: f"${v:.2f}+")
    max_hold = cols[1].selectbox("Max hold (minutes)", [5, 10, 15, 30, 60],
                                 index=[5, 10, 15, 30, 60].index(DEFAULT_MAX_HOLD_MINUTES))
    min_volume = cols[2].number_input("Min volume", min_value=0, value=DEFAULT_MIN_VOLUME, step=500)
    contracts = clamp_contracts(cols[3].number_input("Contracts", min_value=1, max_value=MAX_CONTRACTS, value=1))

    if st.button("🔍 Find Patterns", type="primary", disabled=not ticker):
        params = PatternScanParams(
            min_stock_move=min_move,
            max_hold_minutes=int(max_hold),
            min_volume=min_volume or None,
        )
        try:
            with st.spinner("Loading minute bars..."):
                bars = service.get_minute_bars(ticker, start, end)
            st.session_state['patterns'] = IntradayPatternScanner.scan_sessions(bars, params)
        except (MarketDataError, InvalidParameterError) as e:
            st.error(f"❌ {e}")
            st.session_state['patterns'] = []

    patterns = st.session_state['patterns']
    if not patterns:
        st.info("No patterns yet.")
        return

    stats = summarize_patterns(patterns)
    cols = st.columns(5)
    cols[0].metric("Profitable", stats.total_patterns)
    cols[1].metric("Win rate", format_percent(stats.win_rate, 1))
    cols[2].metric("Avg profit", format_currency(stats.avg_profit, 0))
    cols[3].metric("Avg hold", f"{stats.avg_hold_minutes:.1f}m")
    cols[4].metric("Calls", format_percent(stats.call_share, 0))

    table = patterns_to_frame(patterns, contracts)
    if table.empty:
        st.warning("No profitable patterns found")
        return
    st.dataframe(table.head(15), use_container_width=True, hide_index=True)

    winners = [p for p in patterns if p.success][:15]
    picked = st.selectbox(
        "Follow pattern",
        range(len(winners)),
        format_func=lambda i: (
            f"#{i + 1} {winners[i].direction} ${winners[i].strike} "
            f"{to_market_time(winners[i].entry_time):%Y-%m-%d %H:%M} ET "
            f"+{format_currency(winners[i].estimated_profit, 0)}"
        ),
    )
    if st.button("🔶 Track this option"):
        pattern = winners[picked]
        expiry = session_date(pattern.entry_time)
        try:
            day_bars = service.get_daily_bars(ticker, expiry, expiry)
        except MarketDataError as e:
            st.error(f"❌ {e}")
            return
        state = select_volatile_day(_state(), DailyMoveScanner.measure(day_bars[0]))
        state = select_option(state, pattern.strike, pattern.direction, expiry)
        _set_state(set_mode(state, "OPTION"))
        st.session_state['next_view'] = "Analyze Day"
        st.rerun()


# ============================================================
# NEWS SIDEBAR
# ============================================================
def render_news(ticker: str, service: MarketDataService):
    st.markdown(f"### 📰 {ticker + ' News' if ticker else 'Market News'}")
    articles = service.get_news(ticker) if ticker else []
    if not articles:
        st.caption("No news available")
        return
    for article in articles[:10]:
        st.markdown(f"[{article.title}]({article.article_url})")
        st.caption(f"{article.publisher} • {article.time_ago()}")


# ============================================================
# MAIN
# ============================================================
def main():
    _init_state()
    # view switches requested by buttons must land before the radio is built
    if 'next_view' in st.session_state:
        st.session_state['view'] = st.session_state.pop('next_view')

    with st.sidebar:
        st.title("⚡ 0DTE Options Explorer")
        ticker = st.selectbox("Ticker", [""] + TICKERS, format_func=lambda t: t or "Select Ticker")
        st.session_state['api_key'] = st.text_input(
            "Polygon API Key", value=st.session_state['api_key'], type="password",
            help="Kept for this session only. Without a key, Yahoo Finance is used."
        )
        view = st.radio(
            "View",
            ["Find Volatile Days", "Analyze Day", "Intraday Patterns"],
            key="view",
        )

    service = get_market_data(st.session_state['api_key'])
    st.sidebar.caption(f"Data source: {service.source}")

    main_col, news_col = st.columns([3, 1])
    with main_col:
        if view == "Find Volatile Days":
            render_scanner(ticker, service)
        elif view == "Analyze Day":
            render_day_analysis(ticker, service)
        else:
            render_patterns(ticker, service)
    with news_col:
        render_news(ticker, service)


main()
