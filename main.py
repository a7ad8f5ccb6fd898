"""
Main entry point for the EstateFlow campaign planner.
"""
import logging
import streamlit as st

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from config.settings import config_manager
from data.manager import PortfolioStore
from business_logic.error_handler import SnapshotError, error_handler
from business_logic.project_controller import ProjectController
from business_logic.weekly_distribution import resolve_reporting_window
from ui.components import PortfolioDashboard, ProjectDetailView, render_sidebar, render_window_caption


def get_controller(store: PortfolioStore) -> ProjectController:
    """Session-scoped controller, loaded from the snapshot store on first use."""
    if 'controller' not in st.session_state:
        try:
            state = store.load()
        except SnapshotError as e:
            error_info = error_handler.classify_error(e, "snapshot load")
            error_handler.log_error(error_info, "Startup")
            notification = error_handler.create_user_notification(error_info)
            st.error(f"❌ {notification['title']}: {notification['message']}")
            if st.button("Reset to sample portfolio"):
                store.clear()
                st.rerun()
            st.stop()
        st.session_state['controller'] = ProjectController(state)
    return st.session_state['controller']


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="EstateFlow",
        page_icon="🏙️",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    st.title("🏙️ EstateFlow")
    st.markdown("Plan, distribute and track real-estate campaign funnels")

    config = config_manager.load_config()
    store = PortfolioStore(config.snapshot_dir, config.campaign_start_date)
    controller = get_controller(store)

    settings = render_sidebar(config.default_view_mode, config.report_start_date, config.report_end_date)
    if st.sidebar.button("↩️ Undo last change", disabled=not controller.history):
        controller.undo()
        store.save(controller.state)
        st.rerun()
    window = resolve_reporting_window(
        settings['report_start'], settings['report_end'], config.campaign_start_date, config.campaign_weeks
    )

    dashboard = PortfolioDashboard(controller, store)
    project_id = dashboard.render(settings['view_mode'], window)

    if project_id is not None:
        st.divider()
        project = controller.get_project(project_id)
        render_window_caption(window, [w.week_label for w in project.weeks])
        ProjectDetailView(controller, store).render(project_id, settings['view_mode'], window)

    with st.expander("System Information"):
        col1, col2 = st.columns(2)

        with col1:
            st.write("**Configuration:**")
            st.write(f"Campaign Start: {config.campaign_start_date.isoformat()}")
            st.write(f"Campaign Weeks: {config.campaign_weeks}")
            st.write(f"Snapshot Folder: {config.snapshot_dir}")

        with col2:
            st.write("**Session:**")
            st.write(f"Projects: {len(controller.projects)}")
            st.write(f"Snapshot saved: {'yes' if store.snapshot_exists() else 'no'}")
            st.write(f"Errors logged: {error_handler.get_error_statistics()['total_errors']}")


if __name__ == "__main__":
    main()
