from commons.base_db import BaseDB


class TopicDao(BaseDB):
    """
    TopicDao 提供 topic 表的建表、upsert、删除与清空操作。
    start_date 只在首次插入时写入，之后的 upsert 不覆盖。
    """

    def ensure_table(self):
        create_table_sql = """
                           CREATE TABLE IF NOT EXISTS topic
                           (
                               topic                VARCHAR(255) PRIMARY KEY,
                               msg_publish_count    INT      NOT NULL DEFAULT 0,
                               accumulated_msg_size BIGINT   NOT NULL DEFAULT 0,
                               start_date           DATETIME,
                               participants         INT      NOT NULL DEFAULT 0
                           ) ENGINE = InnoDB
                             DEFAULT CHARSET = utf8mb4;
                           """
        self.execute(create_table_sql, action="创建 topic 表")
        self.logger.log_info("已确保 topic 表存在")

    def upsert_topic(self, name: str, msg_publish_count: int, accumulated_msg_size: int,
                     start_date: str, participants: int):
        """
        插入或更新一条话题统计
        """
        upsert_sql = """
                     INSERT INTO topic (topic, msg_publish_count, accumulated_msg_size, start_date, participants)
                     VALUES (%s, %s, %s, %s, %s)
                     ON DUPLICATE KEY UPDATE msg_publish_count=VALUES(msg_publish_count),
                                             accumulated_msg_size=VALUES(accumulated_msg_size),
                                             participants=VALUES(participants)
                     """
        self.execute(upsert_sql, (name, msg_publish_count, accumulated_msg_size, start_date, participants),
                     action=f"upsert topic {name}")

    def delete_topic(self, name: str):
        """
        删除已结束的话题
        """
        deleted = self.execute("DELETE FROM topic WHERE topic = %s", (name,),
                               action=f"删除 topic {name}")
        self.logger.log_info(f"删除 topic 成功，topic={name}，影响 {deleted} 行")
        return deleted

    def delete_all(self):
        self.execute("DELETE FROM topic", action="清空 topic 表")
