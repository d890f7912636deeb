from commons.base_logger import BaseLogger
from dao.client_dao import ClientDao
from dao.realtime_dao import RealtimeDao
from dao.topic_dao import TopicDao
from mydataclass.db_config import DbConfig
from mydataclass.realtime import RealtimeRow


class TrafficStore:
    """
    LogReader 使用的存储门面：把 client / topic / realtime 三个 DAO 组合成一个对象。
    三个 DAO 共用同一个连接池（同一个 DbConfig）。
    所有写方法失败时抛出 mysql.connector.Error，由调用方决定是否跳过。
    """

    def __init__(self, config: DbConfig, logger: BaseLogger | None = None):
        self.logger = logger or BaseLogger(name='TrafficStore', to_file=True)
        self.client_dao = ClientDao(config, logger=self.logger)
        self.topic_dao = TopicDao(config, logger=self.logger)
        self.realtime_dao = RealtimeDao(config, logger=self.logger)

    def ensure_tables(self):
        self.client_dao.ensure_table()
        self.topic_dao.ensure_table()
        self.realtime_dao.ensure_table()

    def clear_all_tables(self):
        """启动时清空三张表（上一次进程留下的在线状态已失效）"""
        self.client_dao.delete_all()
        self.topic_dao.delete_all()
        self.realtime_dao.delete_all()
        self.logger.log_info("已清空 client / topic / realtime 表")

    def upsert_client(self, name, msg_publish_count, accumulated_msg_size, platform, topic):
        self.client_dao.upsert_client(name, msg_publish_count, accumulated_msg_size, platform, topic)

    def upsert_topic(self, name, msg_publish_count, accumulated_msg_size, start_date, participants):
        self.topic_dao.upsert_topic(name, msg_publish_count, accumulated_msg_size, start_date, participants)

    def delete_topic(self, name):
        self.topic_dao.delete_topic(name)

    def count_realtime_rows(self) -> int:
        return self.realtime_dao.count_rows()

    def delete_oldest_realtime_row(self):
        self.realtime_dao.delete_oldest()

    def upsert_realtime_row(self, row: RealtimeRow):
        self.realtime_dao.upsert_row(row)
