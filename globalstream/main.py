import logging

from dotenv import load_dotenv

from globalstream.config import AppConfig
from globalstream.dao.channel_retreival.iptv_org import IptvOrgChannelSource
from globalstream.dao.probe.http import HttpHeadProbe
from globalstream.players.vlc import VLCPlayer
from globalstream.services.cli import CLIService
from globalstream.services.report import ReportService
from globalstream.services.session import ChannelSession
from globalstream.services.verification import VerificationPipeline

logger = logging.getLogger(__name__)


def main():
    load_dotenv()
    config = AppConfig.from_env()

    logging.basicConfig(
        filename=config.log_file,
        filemode="w",
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    source = IptvOrgChannelSource(base_url=config.base_url)
    pipeline = VerificationPipeline(
        probe=HttpHeadProbe(),
        batch_size=config.batch_size,
        timeout=config.probe_timeout,
    )
    session = ChannelSession(pipeline)
    session.load(
        source.retreive_channels_by_country(
            config.country, secure_context=config.secure_context
        )
    )
    logger.info(f"Loaded {len(session.snapshot)} channels for {config.country}")

    if config.mode == "report":
        ReportService(session).run()
        return

    CLIService(session=session, player=VLCPlayer(config.vlc_path)).run()


if __name__ == "__main__":
    main()
