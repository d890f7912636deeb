from commons.base_db import BaseDB
from mydataclass.realtime import RealtimeRow


class RealtimeDao(BaseDB):
    """
    RealtimeDao 维护 realtime 历史表：
    - 以 date（秒级）为主键，同一秒重复写入时覆盖
    - 行数上限由调用方控制：先 count，满了删最旧一条，再写入
    """

    def ensure_table(self):
        create_table_sql = """
                           CREATE TABLE IF NOT EXISTS realtime
                           (
                               date                  DATETIME PRIMARY KEY,
                               number_of_connections INT    NOT NULL DEFAULT 0,
                               accumulated_msg_size  BIGINT NOT NULL DEFAULT 0,
                               msg_publish_count     INT    NOT NULL DEFAULT 0,
                               number_of_senders     INT    NOT NULL DEFAULT 0
                           ) ENGINE = InnoDB
                             DEFAULT CHARSET = utf8mb4;
                           """
        self.execute(create_table_sql, action="创建 realtime 表")
        self.logger.log_info("已确保 realtime 表存在")

    def count_rows(self) -> int:
        """realtime 表当前行数"""
        row = self.fetch_one("SELECT COUNT(*) AS count FROM realtime")
        return int(row[0]) if row else 0

    def delete_oldest(self) -> int:
        """删除 date 最早的一行，返回影响行数"""
        return self.execute("DELETE FROM realtime ORDER BY date ASC LIMIT 1",
                            action="删除最旧 realtime 记录")

    def upsert_row(self, row: RealtimeRow):
        upsert_sql = """
                     INSERT INTO realtime (date, number_of_connections, accumulated_msg_size,
                                           msg_publish_count, number_of_senders)
                     VALUES (%s, %s, %s, %s, %s)
                     ON DUPLICATE KEY UPDATE number_of_connections=VALUES(number_of_connections),
                                             accumulated_msg_size=VALUES(accumulated_msg_size),
                                             msg_publish_count=VALUES(msg_publish_count),
                                             number_of_senders=VALUES(number_of_senders)
                     """
        self.execute(upsert_sql, row.as_params(), action=f"写入 realtime {row.date}")

    def delete_all(self):
        self.execute("DELETE FROM realtime", action="清空 realtime 表")
